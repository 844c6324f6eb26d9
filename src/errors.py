class ConfigurationError(ValueError):
    """A required secret or setting is missing; the dependent path must not run."""


class MailerError(RuntimeError):
    """The transactional-email provider rejected a send."""
