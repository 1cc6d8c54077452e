from __future__ import annotations


class CompilationError(Exception):
    """Structural problem that aborts a whole compile."""

    def __init__(
        self,
        message: str,
        *,
        node_id: str | None = None,
        kind: str | None = None,
        diagnostics: list[str] | None = None,
    ) -> None:
        self.node_id = node_id
        self.kind = kind
        self.diagnostics = diagnostics if diagnostics is not None else [message]
        super().__init__(message)


class UnknownKind(CompilationError):
    def __init__(self, node_id: str | None, kind: str) -> None:
        target = f"Node '{node_id}'" if node_id else "A node"
        super().__init__(f"{target} references unknown block kind '{kind}'.", node_id=node_id, kind=kind)


class DanglingReference(CompilationError):
    def __init__(self, missing_id: str, *, node_id: str | None = None, kind: str | None = None, slot: str) -> None:
        self.missing_id = missing_id
        self.slot = slot
        if node_id is None:
            message = f"Root node '{missing_id}' does not exist in the program graph."
        else:
            message = f"Node '{node_id}' ({kind}) {slot} points to missing node '{missing_id}'."
        super().__init__(message, node_id=node_id, kind=kind)


class CyclicValueInput(CompilationError):
    def __init__(self, node_id: str, kind: str, path: list[str]) -> None:
        self.path = path
        cycle = " -> ".join([*path, node_id])
        super().__init__(
            f"Value inputs of node '{node_id}' ({kind}) form a cycle: {cycle}.",
            node_id=node_id,
            kind=kind,
        )


class CyclicStatementChain(CompilationError):
    def __init__(self, node_id: str, kind: str) -> None:
        super().__init__(
            f"Statement node '{node_id}' ({kind}) is reached twice; statement chains must not loop or share nodes.",
            node_id=node_id,
            kind=kind,
        )
