"""Exceptions raised while opening and reading documents."""


class DocumentError(Exception):
    """A document could not be opened or read."""