# invitation_engine/domain/errors.py


class InvitationEngineError(Exception):
    """Base class for errors raised by the invitation engine."""


class ResourceLoadError(InvitationEngineError):
    """A background or QR image could not be fetched or decoded. Terminal for the render."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load image '{source[:70]}': {reason}")


class TemplateNotFoundError(InvitationEngineError):
    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")
