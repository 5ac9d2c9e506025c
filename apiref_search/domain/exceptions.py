"""Domain exception hierarchy."""


class DomainException(Exception):
    pass


class InvalidSearchQueryException(DomainException):
    pass


class EntryNotFoundException(DomainException):
    pass


class ShardLoadException(DomainException):
    """A shard could not be made resident. Scoped to one bucket."""

    def __init__(self, bucket_key: str, message: str) -> None:
        super().__init__(f"Shard '{bucket_key}': {message}")
        self.bucket_key = bucket_key
        self.reason = message


class ShardFetchFailure(ShardLoadException):
    pass


class ShardParseFailure(ShardLoadException):
    pass


class QueryCancelled(DomainException):
    """Raised when a newer input supersedes the running query."""

    def __init__(self, generation: int) -> None:
        super().__init__(f"Query generation {generation} superseded")
        self.generation = generation


class ManifestLoadException(DomainException):
    """The bucket manifest could not be read or understood at startup."""
