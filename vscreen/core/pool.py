"""Output pool: the fixed set of virtual output slots.

Slot state is rebuilt from a fresh backend query on every read. Mutations
call the backend first and finalize the in-memory slot only once that call
returned; a failing call leaves the pool exactly as it was.
"""

import logging
import re
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from ..errors import AlreadyActiveError, FormatError, InvalidSlotError, NotActiveError
from ..models.geometry import Position
from ..models.mode import ModeRecord
from ..models.orientation import Orientation
from ..models.slot import SlotState, VirtualOutputSlot
from .backend import DisplayBackend
from .config import VscreenConfig

logger = logging.getLogger("vscreen.pool")

SLOT_ID_PATTERN = re.compile(r"[0-9]+")


def parse_slot_id(token) -> int:
    """Parse an ``--output/--off/--change`` target.

    Raises:
        FormatError: If token is not a positive integer
    """
    text = str(token)
    if not SLOT_ID_PATTERN.fullmatch(text) or int(text) < 1:
        raise FormatError(
            f"Invalid output number: '{token}'",
            suggestion="Outputs are addressed by number, e.g. --output 1",
            context={"output": token},
        )
    return int(text)


class OutputPool:
    """Fixed pool of virtual output slots, indexed 1..N."""

    def __init__(self, backend: DisplayBackend, config: VscreenConfig):
        self.backend = backend
        self.config = config
        self._size: Optional[int] = config.pool_size
        self._slots: Dict[int, VirtualOutputSlot] = {}

    #################### pool shape ####################

    @property
    def size(self) -> int:
        """Number of slots; discovered once from the server when not configured."""
        if self._size is None:
            self._size = self._discover_size()
        return self._size

    def _discover_size(self) -> int:
        names = {output.name for output in self.backend.query_outputs()}
        size = 0
        while self.config.slot_name(size + 1) in names:
            size += 1
        logger.debug(f"Discovered {size} {self.config.output_prefix} output(s)")
        return size

    def validate_slot_id(self, slot_id) -> int:
        """Return slot_id as an int within the pool.

        Raises:
            FormatError: If slot_id is not a positive integer
            InvalidSlotError: If slot_id is outside 1..size
        """
        index = parse_slot_id(slot_id)
        if index > self.size:
            raise InvalidSlotError(index, self.size)
        return index

    #################### queries ####################

    def refresh(self) -> List[VirtualOutputSlot]:
        """Rebuild every slot from a fresh backend query."""
        outputs = {output.name: output for output in self.backend.query_outputs()}
        self._slots = {
            index: VirtualOutputSlot.from_output(
                index,
                self.config.slot_name(index),
                outputs.get(self.config.slot_name(index)),
            )
            for index in range(1, self.size + 1)
        }
        return [self._slots[index] for index in sorted(self._slots)]

    def list_all(self) -> List[VirtualOutputSlot]:
        return self.refresh()

    def list_active(self) -> List[VirtualOutputSlot]:
        return [slot for slot in self.refresh() if slot.is_active]

    def list_free(self) -> List[VirtualOutputSlot]:
        return [slot for slot in self.refresh() if not slot.is_active]

    def get(self, slot_id) -> VirtualOutputSlot:
        """Fresh view of one slot.

        Raises:
            FormatError, InvalidSlotError: If slot_id is not in the pool
        """
        index = self.validate_slot_id(slot_id)
        self.refresh()
        return self._slots[index]

    def find_by_name(self, name: str) -> Optional[VirtualOutputSlot]:
        """Fresh view of the slot whose output is called name, if any."""
        for slot in self.refresh():
            if slot.name == name:
                return slot
        return None

    def require_free(self, slot_id) -> VirtualOutputSlot:
        slot = self.get(slot_id)
        if slot.is_active:
            raise AlreadyActiveError(slot.name)
        return slot

    def require_active(self, slot_id) -> VirtualOutputSlot:
        slot = self.get(slot_id)
        if not slot.is_active:
            raise NotActiveError(slot.name)
        return slot

    #################### mutations ####################

    @contextmanager
    def _staged(self, slot: VirtualOutputSlot) -> Iterator[VirtualOutputSlot]:
        """Finalize slot in the pool only if the block completes."""
        logger.debug(f"Staging {slot.name}: {slot.state.value}")
        yield slot
        self._slots[slot.index] = slot
        logger.debug(f"Committed {slot.name}: {slot.state.value}")

    def activate(
        self,
        slot_id,
        mode: ModeRecord,
        position: Position,
        orientation: Orientation = Orientation.NORMAL,
    ) -> VirtualOutputSlot:
        """Turn a free slot on.

        Raises:
            InvalidSlotError: If slot_id is outside the pool
            AlreadyActiveError: If the slot is already active
            ExtensionError: If the backend rejects the configuration
        """
        current = self.require_free(slot_id)
        staged = VirtualOutputSlot(
            index=current.index,
            name=current.name,
            state=SlotState.ACTIVE,
            mode=mode.name,
            size=mode.size,
            position=position,
            orientation=orientation,
        )
        with self._staged(staged):
            self.backend.set_output(staged.name, mode.name, orientation, position)

        logger.info(f"Activated {staged.name}: {mode.size} at {position} ({orientation.value})")
        return staged

    def change(
        self,
        slot_id,
        mode: Optional[ModeRecord] = None,
        orientation: Optional[Orientation] = None,
        position: Optional[Position] = None,
    ) -> VirtualOutputSlot:
        """Apply the given attributes to an active slot, keeping the rest.

        Raises:
            InvalidSlotError: If slot_id is outside the pool
            NotActiveError: If the slot is free
            ExtensionError: If the backend rejects the configuration
        """
        current = self.require_active(slot_id)
        update = {}
        if mode is not None:
            update["mode"] = mode.name
            update["size"] = mode.size
        if orientation is not None:
            update["orientation"] = orientation
        if position is not None:
            update["position"] = position
        staged = current.model_copy(update=update)

        with self._staged(staged):
            self.backend.set_output(staged.name, staged.mode, staged.orientation, staged.position)

        logger.info(f"Changed {staged.name}: {', '.join(sorted(update)) or 'nothing'}")
        return staged

    def deactivate(self, slot_id) -> VirtualOutputSlot:
        """Turn an active slot off and clear its attributes.

        Raises:
            InvalidSlotError: If slot_id is outside the pool
            NotActiveError: If the slot is already free
            ExtensionError: If the backend fails
        """
        current = self.require_active(slot_id)
        staged = current.cleared()
        with self._staged(staged):
            self.backend.clear_output(staged.name)

        logger.info(f"Deactivated {staged.name}")
        return staged

    def deactivate_all(self) -> List[VirtualOutputSlot]:
        """Turn off every active slot; a no-op when none is active.

        Returns:
            The slots that were turned off
        """
        released = []
        for slot in self.list_active():
            staged = slot.cleared()
            with self._staged(staged):
                self.backend.clear_output(staged.name)
            released.append(slot)
        logger.info(f"Deactivated {len(released)} output(s)")
        return released
