from __future__ import annotations


class GenesisError(Exception):
    pass


class GenesisLoadError(GenesisError):
    pass


class GenesisValidationError(GenesisLoadError):
    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        summary = "; ".join(self.problems[:5])
        if len(self.problems) > 5:
            summary += f"; ... ({len(self.problems) - 5} more)"
        super().__init__(f"Invalid genesis config ({len(self.problems)} problems): {summary}")


class GenesisDefect(GenesisError):
    """A stored genesis value could not be interpreted.

    Raised from value accessors. Continuing with an uninterpretable economic or
    structural parameter risks silent consensus divergence, so callers should
    let this propagate and stop the node.
    """
