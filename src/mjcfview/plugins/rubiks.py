"""Rubik's cube plugin: face turns applied as extra body rotations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from ..core.nodes import NodeKind, SceneNode
from ..core.tree import SceneTree

logger = logging.getLogger(__name__)

CORE_BODY = "core"


class CubeMove(str, Enum):
    """Quarter turn of one face; ``+`` and ``-`` are opposite directions."""

    L_PLUS = "L+"
    L_MINUS = "L-"
    R_PLUS = "R+"
    R_MINUS = "R-"
    U_PLUS = "U+"
    U_MINUS = "U-"
    D_PLUS = "D+"
    D_MINUS = "D-"
    F_PLUS = "F+"
    F_MINUS = "F-"
    B_PLUS = "B+"
    B_MINUS = "B-"

    @property
    def face(self) -> str:
        return self.value[0]

    @property
    def is_plus(self) -> bool:
        return self.value[1] == "+"

    @classmethod
    def parse_sequence(cls, text: str) -> list[CubeMove]:
        """Parse whitespace-separated moves such as ``"F+ B- U+"``.

        Raises:
            ValueError: On an unknown move
        """
        moves = []
        for token in text.split():
            try:
                moves.append(cls(token))
            except ValueError:
                raise ValueError(f"Unknown cube move: {token!r}") from None
        return moves


SCRAMBLE = CubeMove.parse_sequence("F+ B+ U+ R+ D+ L+ R+ R+ D+ F+")

# Euler angles (degrees) appended to each turned cubelet body
ROTATIONS: dict[CubeMove, tuple[float, float, float]] = {
    CubeMove.L_PLUS: (90.0, 0.0, 0.0),
    CubeMove.L_MINUS: (-90.0, 0.0, 0.0),
    CubeMove.R_PLUS: (-90.0, 0.0, 0.0),
    CubeMove.R_MINUS: (90.0, 0.0, 0.0),
    CubeMove.U_PLUS: (0.0, -90.0, 0.0),
    CubeMove.U_MINUS: (0.0, 90.0, 0.0),
    CubeMove.D_PLUS: (0.0, 90.0, 0.0),
    CubeMove.D_MINUS: (0.0, -90.0, 0.0),
    CubeMove.F_PLUS: (0.0, 0.0, 90.0),
    CubeMove.F_MINUS: (0.0, 0.0, -90.0),
    CubeMove.B_PLUS: (0.0, 0.0, -90.0),
    CubeMove.B_MINUS: (0.0, 0.0, 90.0),
}

FACE_WORDS = {"L": "left", "R": "right", "U": "up", "D": "down", "F": "front", "B": "back"}

PRIMARY_AXIS = {"L": "x", "R": "x", "U": "z", "D": "z", "F": "y", "B": "y"}

# Slots visited by a plus turn; each slot receives the content of the one before it
EDGE_CYCLES = {
    "L": ("left-up", "left-front", "left-down", "left-back"),
    "R": ("right-up", "right-back", "right-down", "right-front"),
    "U": ("up-front", "left-up", "up-back", "right-up"),
    "D": ("down-front", "right-down", "down-back", "left-down"),
    "F": ("up-front", "right-front", "down-front", "left-front"),
    "B": ("up-back", "left-back", "down-back", "right-back"),
}

CORNER_CYCLES = {
    "L": ("up-left-back", "up-left-front", "down-left-front", "down-left-back"),
    "R": ("up-right-front", "up-right-back", "down-right-back", "down-right-front"),
    "U": ("up-left-back", "up-right-back", "up-right-front", "up-left-front"),
    "D": ("down-left-front", "down-right-front", "down-right-back", "down-left-back"),
    "F": ("up-left-front", "up-right-front", "down-right-front", "down-left-front"),
    "B": ("up-right-back", "up-left-back", "down-left-back", "down-right-back"),
}

# Order in which a corner's stored colors are read for each primary axis
_CORNER_ORDER = {"x": (0, 1, 2), "y": (1, 0, 2), "z": (2, 0, 1)}


class SlotKind(Enum):
    CENTER = "center"
    EDGE = "edge"
    CORNER = "corner"


@dataclass
class Slot:
    """A position on the cube and the cubelet currently in it.

    Attributes:
        kind: Center, edge or corner position
        cubelet: Index of the cubelet body under the core body
        colors: Color indices of the cubelet, one per visible side
        axes: Axes the stored colors belong to (edges only)
    """

    kind: SlotKind
    cubelet: int
    colors: list[int] = field(default_factory=list)
    axes: tuple[str, ...] = ()

    def _order(self, primary: str) -> tuple[int, ...]:
        if self.kind is SlotKind.CORNER:
            return _CORNER_ORDER[primary]
        if self.kind is SlotKind.EDGE and primary == self.axes[1]:
            return (1, 0)
        return tuple(range(len(self.colors)))

    def oriented_colors(self, primary: str) -> tuple[int, ...]:
        """Colors read with ``primary`` axis first."""
        return tuple(self.colors[k] for k in self._order(primary))

    def set_oriented_colors(self, primary: str, values: tuple[int, ...]) -> None:
        """Inverse of ``oriented_colors``."""
        for k, value in zip(self._order(primary), values):
            self.colors[k] = value


def _edge(axes: tuple[str, str], colors: tuple[int, int], cubelet: int) -> Slot:
    return Slot(SlotKind.EDGE, cubelet, list(colors), axes)


def _corner(cubelet: int) -> Slot:
    return Slot(SlotKind.CORNER, cubelet, [1, 0, 2], ("x", "y", "z"))


def solved_slots() -> dict[str, Slot]:
    """Slot map of a solved cube: 6 centers, 12 edges and 8 corners."""
    return {
        "right": Slot(SlotKind.CENTER, 0),
        "left": Slot(SlotKind.CENTER, 1),
        "up": Slot(SlotKind.CENTER, 2),
        "down": Slot(SlotKind.CENTER, 3),
        "back": Slot(SlotKind.CENTER, 4),
        "front": Slot(SlotKind.CENTER, 5),
        "left-up": _edge(("x", "y"), (1, 0), 10),
        "left-down": _edge(("x", "y"), (1, 0), 11),
        "left-back": _edge(("x", "z"), (0, 1), 12),
        "left-front": _edge(("x", "z"), (0, 1), 13),
        "right-up": _edge(("x", "y"), (0, 1), 6),
        "right-down": _edge(("x", "y"), (1, 0), 7),
        "right-back": _edge(("x", "z"), (0, 1), 8),
        "right-front": _edge(("x", "z"), (0, 1), 9),
        "up-back": _edge(("y", "z"), (0, 1), 14),
        "up-front": _edge(("y", "z"), (0, 1), 15),
        "down-back": _edge(("y", "z"), (0, 1), 16),
        "down-front": _edge(("y", "z"), (0, 1), 17),
        "up-left-front": _corner(23),
        "up-right-front": _corner(19),
        "up-left-back": _corner(22),
        "up-right-back": _corner(18),
        "down-left-front": _corner(25),
        "down-right-front": _corner(21),
        "down-left-back": _corner(24),
        "down-right-back": _corner(20),
    }


class RubiksCubePlugin:
    """Turns faces of a cube built from 26 cubelet bodies.

    The cubelets are the child bodies of the worldbody body named ``core``,
    addressed by their position among that body's child bodies. A turn
    appends a quarter rotation to the nine bodies on the turned face and
    updates the logical slot map to know where every cubelet now sits.

    Example:
        plugin = RubiksCubePlugin(CubeMove.parse_sequence("F+ R-"))
        model.plugins.register(plugin)
    """

    def __init__(self, moves: Iterable[CubeMove] = ()) -> None:
        self.moves = list(moves)
        self.slots = solved_slots()
        self.history: list[CubeMove] = []
        self.tree: SceneTree | None = None

    def process_model_load(self, tree: SceneTree) -> None:
        """Remember the tree and apply the configured moves."""
        self.tree = tree
        for move in self.moves:
            self.apply_move(move)

    def process_sim_loop(self, tree: SceneTree) -> None:
        pass

    def cubelet_in(self, slot: str) -> int:
        """Index of the cubelet currently in ``slot``."""
        return self.slots[slot].cubelet

    def indices_for_move(self, move: CubeMove) -> list[int]:
        """Cubelets currently on the face ``move`` turns."""
        word = FACE_WORDS[move.face]
        return [slot.cubelet for key, slot in self.slots.items() if word in key]

    def apply_move(self, move: CubeMove) -> None:
        """Rotate the bodies on the turned face and update the slot map.

        Raises:
            RuntimeError: If no model has been loaded
        """
        if self.tree is None:
            raise RuntimeError("RubiksCubePlugin has no loaded model")

        core = self._core_body()
        if core is None:
            logger.warning(f"No body named {CORE_BODY!r} in the worldbody, only updating slots")
        else:
            targets = set(self.indices_for_move(move))
            bodies = [c for c in self.tree.children(core.id) if c.kind is NodeKind.BODY]
            for index, body in enumerate(bodies):
                if index in targets:
                    body.data.transform.add_rotation(ROTATIONS[move])

        self._update_slots(move)
        self.history.append(move)
        logger.debug(f"Applied cube move {move.value}")

    def _core_body(self) -> SceneNode | None:
        worldbody = self.tree.worldbody
        if worldbody is None:
            return None
        for child in self.tree.children(worldbody.id):
            if child.kind is NodeKind.BODY and child.name == CORE_BODY:
                return child
        return None

    def _update_slots(self, move: CubeMove) -> None:
        primary = PRIMARY_AXIS[move.face]
        # A minus turn is three plus turns of the slot map
        turns = 1 if move.is_plus else 3
        for _ in range(turns):
            self._cycle(CORNER_CYCLES[move.face], primary, lambda c: (c[0], c[2], c[1]))
            self._cycle(EDGE_CYCLES[move.face], primary, lambda c: c)

    def _cycle(
        self,
        keys: tuple[str, ...],
        primary: str,
        twist: Callable[[tuple[int, ...]], tuple[int, ...]],
    ) -> None:
        last = self.slots[keys[-1]]
        carried = (last.cubelet, last.oriented_colors(primary))

        for key in keys:
            slot = self.slots[key]
            current = (slot.cubelet, slot.oriented_colors(primary))
            cubelet, colors = carried
            slot.set_oriented_colors(primary, twist(colors))
            slot.cubelet = cubelet
            carried = current
