class ScoreServiceError(Exception):
    """Base class for failures on the score write path."""


class ConfigurationMissing(ScoreServiceError):
    """The score store credential or database URL is absent or malformed."""


class PersistenceFailure(ScoreServiceError):
    """The database refused or failed the append."""
