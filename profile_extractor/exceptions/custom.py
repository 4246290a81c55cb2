class InvalidUrlError(Exception):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url}: {reason}")


class ScrapingError(Exception):
    def __init__(self, message: str, url: str | None = None):
        self.message = message
        self.url = url
        super().__init__(message)


class LLMError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ExtractionError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
