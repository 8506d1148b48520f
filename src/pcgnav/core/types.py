"""
Core type definitions for pcgnav.

Pydantic models for every artifact the analysis emits. All models ignore
unknown fields so newer analysis output keeps loading, and are frozen
because fetched artifacts are never mutated after the fetch.
"""

from enum import StrEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import InvalidAddress


class EvalStmtPhase(StrEnum):
    """The four canonical evaluation phases of a statement, in order."""
    PRE_OPERANDS = "pre_operands"
    POST_OPERANDS = "post_operands"
    PRE_MAIN = "pre_main"
    POST_MAIN = "post_main"


EVAL_PHASES: tuple[EvalStmtPhase, ...] = (
    EvalStmtPhase.PRE_OPERANDS,
    EvalStmtPhase.POST_OPERANDS,
    EvalStmtPhase.PRE_MAIN,
    EvalStmtPhase.POST_MAIN,
)

# Bookkeeping actions that are never presented as navigation steps.
HIDDEN_ACTION_KINDS = frozenset({"MakePlaceOld", "LabelLifetimeProjection"})


class _Artifact(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


def to_block_ref(block: int) -> str:
    """Render a block number in the `bbN` form used by the analysis output."""
    return f"bb{block}"


def parse_block_ref(ref: str | int) -> int:
    """
    Parse a `bbN` block reference.

    Plain integers (and their string form) are accepted as well.

    Raises:
        InvalidAddress: If the reference is not a block.
    """
    if isinstance(ref, int):
        if ref < 0:
            raise InvalidAddress(f"Negative block number: {ref}")
        return ref
    text = ref.strip()
    if text.startswith("bb"):
        text = text[2:]
    if not text.isdigit():
        raise InvalidAddress(f"Not a block reference: {ref!r}")
    return int(text)


class SourcePos(_Artifact):
    line: int
    column: int


class Span(_Artifact):
    low: SourcePos
    high: SourcePos

    @property
    def is_single_line(self) -> bool:
        return self.low.line == self.high.line


class MirStmt(_Artifact):
    """
    One statement (or terminator) of a basic block.

    `stmt` is the human-readable rendering; the loan and borrow sets are
    debug metadata shown in tooltips.
    """
    stmt: str
    debug_stmt: str = ""
    span: Span
    loans_invalidated_start: List[str] = Field(default_factory=list)
    loans_invalidated_mid: List[str] = Field(default_factory=list)
    borrows_in_scope_start: List[str] = Field(default_factory=list)
    borrows_in_scope_mid: List[str] = Field(default_factory=list)

    def tooltip(self) -> str:
        return "\n".join([
            self.debug_stmt,
            f"Loans invalidated at start: {', '.join(self.loans_invalidated_start)}",
            f"Loans invalidated at mid: {', '.join(self.loans_invalidated_mid)}",
            f"Borrows in scope at start: {', '.join(self.borrows_in_scope_start)}",
            f"Borrows in scope at mid: {', '.join(self.borrows_in_scope_mid)}",
        ])


class MirNode(_Artifact):
    """A basic block: ordered statements plus the terminating transfer."""
    id: str
    block: int
    stmts: List[MirStmt] = Field(default_factory=list)
    terminator: MirStmt

    @property
    def terminator_index(self) -> int:
        return len(self.stmts)

    def statement_at(self, index: int) -> Optional[MirStmt]:
        """Resolve a statement index, where `len(stmts)` is the terminator."""
        if 0 <= index < len(self.stmts):
            return self.stmts[index]
        if index == len(self.stmts):
            return self.terminator
        return None

    @property
    def is_resume(self) -> bool:
        """True for unwind-continuation blocks."""
        return self.terminator.stmt == "resume"


class MirEdge(_Artifact):
    source: str
    target: str
    label: str = ""


class MirGraph(_Artifact):
    """CFG node/edge payload of `mir.json`."""
    nodes: List[MirNode] = Field(default_factory=list)
    edges: List[MirEdge] = Field(default_factory=list)

    def node_for_block(self, block: int) -> Optional[MirNode]:
        for node in self.nodes:
            if node.block == block:
                return node
        return None

    def node_by_id(self, node_id: str) -> Optional[MirNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_successor_edge(self, from_block: int, to_block: int) -> bool:
        source = self.node_for_block(from_block)
        target = self.node_for_block(to_block)
        if source is None or target is None:
            return False
        return any(e.source == source.id and e.target == target.id for e in self.edges)


class FunctionMetadata(_Artifact):
    name: str
    source: str = ""
    start: SourcePos


class PhaseGraph(_Artifact):
    """Graph file rendered for one iteration phase of a statement."""
    phase: str
    filename: str

    @model_validator(mode="before")
    @classmethod
    def _accept_pairs(cls, value: Any) -> Any:
        # Older output encodes each phase as a [name, filename] pair.
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return {"phase": value[0], "filename": value[1]}
        return value


class PhaseActionGraphs(_Artifact):
    """Per-phase lists of action graph filenames."""
    pre_operands: List[str] = Field(default_factory=list)
    post_operands: List[str] = Field(default_factory=list)
    pre_main: List[str] = Field(default_factory=list)
    post_main: List[str] = Field(default_factory=list)

    def for_phase(self, phase: str) -> List[str]:
        if phase not in EVAL_PHASES:
            return []
        return getattr(self, phase)


class StmtGraphs(_Artifact):
    """Iteration payload of one statement: phase graphs and action graphs."""
    at_phase: List[PhaseGraph] = Field(default_factory=list)
    actions: PhaseActionGraphs = Field(default_factory=PhaseActionGraphs)

    def phase_names(self) -> List[str]:
        return [p.phase for p in self.at_phase]

    def phase_index(self, name: str) -> int:
        for idx, phase in enumerate(self.at_phase):
            if phase.phase == name:
                return idx
        return -1


class ActionKind(_Artifact):
    type: str
    data: Any = None


class ActionData(_Artifact):
    kind: ActionKind
    debug_context: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_debug_info(cls, value: Any) -> Any:
        if isinstance(value, dict) and "debug_context" not in value and "debug_info" in value:
            return {**value, "debug_context": value["debug_info"]}
        return value


class PcgAction(_Artifact):
    """One atomic state transformation."""
    type: str = ""
    data: ActionData
    change_summary: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _unwrap_applied_action(cls, value: Any) -> Any:
        # Statement actions may arrive wrapped as {"action": ..., "result": ...}.
        if isinstance(value, dict) and "action" in value and "data" not in value:
            inner = dict(value["action"])
            result = value.get("result") or {}
            if isinstance(result, dict) and result.get("change_summary"):
                inner["change_summary"] = result["change_summary"]
            return inner
        return value

    @property
    def kind(self) -> str:
        return self.data.kind.type

    @property
    def is_hidden(self) -> bool:
        return self.kind in HIDDEN_ACTION_KINDS


class EvalStmtActions(_Artifact):
    pre_operands: List[PcgAction] = Field(default_factory=list)
    post_operands: List[PcgAction] = Field(default_factory=list)
    pre_main: List[PcgAction] = Field(default_factory=list)
    post_main: List[PcgAction] = Field(default_factory=list)

    def for_phase(self, phase: str) -> List[PcgAction]:
        if phase not in EVAL_PHASES:
            return []
        return getattr(self, phase)


class StmtVisualizationData(_Artifact):
    actions: EvalStmtActions = Field(default_factory=EvalStmtActions)


class SuccessorVisualizationData(_Artifact):
    actions: List[PcgAction] = Field(default_factory=list)


class BlockVisualizationData(_Artifact):
    statements: List[StmtVisualizationData] = Field(default_factory=list)
    successors: Dict[str, SuccessorVisualizationData] = Field(default_factory=dict)

    def statement(self, index: int) -> Optional[StmtVisualizationData]:
        if 0 <= index < len(self.statements):
            return self.statements[index]
        return None

    def successor(self, to_block: int) -> Optional[SuccessorVisualizationData]:
        return self.successors.get(to_block_ref(to_block))


class BranchChoice(_Artifact):
    """A branch taken out of `from_block`, restricted to the `chosen` targets."""
    from_block: str = Field(alias="from")
    chosen: List[str] = Field(default_factory=list)


# Sidecar metadata of an action graph: element id -> branch choices.
GraphMetadata = Dict[str, List[BranchChoice]]


def parse_pcg_function_data(payload: Any) -> Dict[int, BlockVisualizationData]:
    """Parse `pcg_data.json` into block number -> block data."""
    if not isinstance(payload, dict):
        return {}
    return {
        parse_block_ref(ref): BlockVisualizationData.model_validate(block)
        for ref, block in payload.items()
    }


def parse_graph_metadata(payload: Any) -> GraphMetadata:
    """
    Parse action-graph sidecar metadata.

    Accepts either `{element: [choice, ...]}` or
    `{element: {"branch_choices": [choice, ...]}}`.
    """
    if not isinstance(payload, dict):
        return {}
    parsed: GraphMetadata = {}
    for element_id, entry in payload.items():
        choices = entry.get("branch_choices", []) if isinstance(entry, dict) else entry
        if not isinstance(choices, list):
            continue
        parsed[str(element_id)] = [BranchChoice.model_validate(c) for c in choices]
    return parsed
