"""Error taxonomy shared by the API, the provisioner and the worker."""


class StudioError(Exception):
    """Base error carrying an HTTP status and a message safe to show callers."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class AuthenticationError(StudioError):
    status_code = 401
    public_message = "Not authenticated"


class AgentNotFoundError(StudioError):
    """Raised for missing agents and for agents owned by someone else."""

    status_code = 404
    public_message = "Agent not found"


class SessionNotFoundError(StudioError):
    status_code = 404
    public_message = "Session not found"


class ProvisioningError(StudioError):
    """The room platform rejected a room, dispatch or credential request.

    The underlying cause is logged server-side; callers only ever see the
    generic message.
    """

    status_code = 500
    public_message = "Failed to provision session"

    def __init__(self, step: str, cause: Exception | None = None):
        super().__init__(self.public_message)
        self.step = step
        self.cause = cause


class ConfigurationMissingError(StudioError):
    """The worker could not resolve agent instructions for a job."""

    public_message = "Instructions are required but not found"


class InvalidAgentConfigError(StudioError):
    """The agent snapshot in room metadata does not validate."""

    public_message = "Agent configuration in room metadata is invalid"


class UnsupportedProviderError(StudioError):
    status_code = 400

    def __init__(self, capability: str, provider: str):
        super().__init__(f"Unsupported {capability} provider: {provider}")
        self.capability = capability
        self.provider = provider
