import docbrowse


def test_public_api_exports() -> None:
    for name in docbrowse.__all__:
        assert hasattr(docbrowse, name)


def test_errors_share_base_class() -> None:
    for error in (
        docbrowse.RootNotFoundError,
        docbrowse.NotFoundError,
        docbrowse.InvalidPathError,
        docbrowse.NotADocumentError,
    ):
        assert issubclass(error, docbrowse.DocBrowseError)
