class ReadinessError(Exception):
    """Base class for every failure surfaced to API callers.

    ``kind`` is the machine-readable error name returned in the response body,
    ``status_code`` the HTTP status the API layer maps it to.
    """

    kind = "ReadinessError"
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail}


# ---------------------------------------------------------------------------
# Scoring contract
# ---------------------------------------------------------------------------


class InvalidInput(ReadinessError):
    """Raised for a malformed raw category result."""

    kind = "InvalidInput"
    status_code = 400


class _CategoryError(ReadinessError):
    status_code = 400

    def __init__(self, category: str, detail: str):
        super().__init__(detail)
        self.category = category

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["category"] = self.category
        return body


class MissingCategory(_CategoryError):
    kind = "MissingCategory"

    def __init__(self, category: str):
        super().__init__(category, f"Missing required category: {category}")


class UnknownCategory(_CategoryError):
    kind = "UnknownCategory"

    def __init__(self, category: str):
        super().__init__(category, f"Unknown category: {category}")


class OutOfRange(ReadinessError):
    kind = "OutOfRange"
    status_code = 400


# ---------------------------------------------------------------------------
# Collaborator responses
# ---------------------------------------------------------------------------


class NoJsonFound(ReadinessError):
    kind = "NoJsonFound"
    status_code = 502

    def __init__(self, detail: str = "No JSON found in language model response"):
        super().__init__(detail)


class _FieldError(ReadinessError):
    def __init__(self, field: str, detail: str):
        super().__init__(detail)
        self.field = field

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["field"] = self.field
        return body


class MissingField(_FieldError):
    """A required field is absent from the language model's JSON reply."""

    kind = "MissingField"
    status_code = 502

    def __init__(self, field: str):
        super().__init__(field, f"Language model response missing required field: {field}")


class UpstreamUnavailable(ReadinessError):
    """Every candidate model failed; the last underlying error is chained."""

    kind = "UpstreamUnavailable"
    status_code = 502


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class MissingRequiredField(_FieldError):
    kind = "MissingRequiredField"
    status_code = 400

    def __init__(self, field: str):
        super().__init__(field, f"{field} is required")


class RenderError(ReadinessError):
    kind = "RenderError"
    status_code = 500
