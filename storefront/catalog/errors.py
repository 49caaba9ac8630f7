class FetchFailure(Exception):
    """The catalog could not be fetched or its payload could not be parsed.

    This is the only catalog error that reaches the shopper; malformed
    prices, unknown categories and empty results are absorbed by the
    view engine.
    """

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url
