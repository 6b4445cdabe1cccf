class PolycascadeError(Exception):
    pass


class InvalidRelationType(PolycascadeError, ValueError):
    def __init__(self, rel_type):
        self.rel_type = rel_type
        super().__init__(f"Invalid relation type {rel_type!r}")


class ProjectionConflict(PolycascadeError, ValueError):
    def __init__(self, path: str, segment: str, value):
        self.path = path
        self.segment = segment
        self.value = value
        super().__init__(
            f"Cannot project '{path}': '{segment}' already holds non-mapping value {value!r}"
        )


class IdentifierUnavailable(PolycascadeError, ValueError):
    def __init__(self, document, reason: str):
        self.document = document
        super().__init__(f"No usable identifier on {document!r}: {reason}")


class StoreError(PolycascadeError, RuntimeError):
    pass


class CascadeDepthExceeded(PolycascadeError, RuntimeError):
    def __init__(self, document, max_depth: int):
        self.document = document
        self.max_depth = max_depth
        super().__init__(f"Nested cascade of {document!r} exceeds maximum depth {max_depth}")


class CascadeErrors(PolycascadeError):
    def __init__(self, errors):
        self.errors = list(errors)
        summary = '; '.join(str(e) for e in self.errors)
        super().__init__(f"{len(self.errors)} cascade error(s): {summary}")
