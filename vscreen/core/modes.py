"""Mode registry: one managed mode per width x height.

Managed modes are named deterministically from their size
(``<mode_prefix><W>x<H>``), so requesting the same size twice finds the
existing mode instead of registering a duplicate.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Set

from ..errors import ExtensionError
from ..models.mode import ModeRecord, PurgeResult
from ..models.resolution import ResolutionSpec
from .backend import DisplayBackend
from .config import VscreenConfig
from .cvt import cvt_modeline

logger = logging.getLogger("vscreen.modes")


class ModeRegistry:
    """Ensures modes exist before use and purges the ones vscreen created."""

    def __init__(self, backend: DisplayBackend, config: VscreenConfig):
        self.backend = backend
        self.config = config

    def is_managed(self, name: str) -> bool:
        return name.startswith(self.config.mode_prefix)

    def list_modes(self, managed_only: bool = False) -> List[ModeRecord]:
        """Registry view of every mode the server currently knows."""
        records = [
            ModeRecord(
                name=info.name,
                width=info.width,
                height=info.height,
                managed=self.is_managed(info.name),
            )
            for info in self.backend.query_modes()
        ]
        if managed_only:
            return [r for r in records if r.managed]
        return records

    def find(self, width: int, height: int) -> Optional[ModeRecord]:
        """Managed record for a size, if one is registered."""
        name = self.config.mode_name(width, height)
        for record in self.list_modes(managed_only=True):
            if record.name == name:
                return record
        return None

    def ensure(self, spec: ResolutionSpec) -> ModeRecord:
        """Return the mode for spec's size, registering it on first use.

        Args:
            spec: Requested resolution

        Returns:
            Existing or newly created ModeRecord

        Raises:
            ExtensionError: If the backend rejects the new mode
        """
        existing = self.find(spec.width, spec.height)
        if existing is not None:
            logger.debug(f"Reusing mode {existing.name}")
            return existing

        name = self.config.mode_name(spec.width, spec.height)
        modeline = cvt_modeline(spec.width, spec.height, self.config.refresh_rate)
        logger.info(f"Registering mode {name} ({spec.label()} @ {self.config.refresh_rate:g}Hz)")
        self.backend.create_mode(name, modeline)
        return ModeRecord(
            name=name,
            width=spec.width,
            height=spec.height,
            managed=True,
            modeline=modeline,
        )

    @contextmanager
    def reserved(self, spec: ResolutionSpec) -> Iterator[ModeRecord]:
        """Ensure the mode for spec for the duration of a block.

        A mode registered here is removed again if the block raises, so a
        rejected output configuration leaves no new mode behind. A mode that
        already existed is never touched.

        Raises:
            ExtensionError: If the backend rejects the new mode
        """
        existing = self.find(spec.width, spec.height)
        if existing is not None:
            logger.debug(f"Reusing mode {existing.name}")
            yield existing
            return

        record = self.ensure(spec)
        try:
            yield record
        except Exception:
            logger.info(f"Rolling back mode {record.name}")
            try:
                self.backend.remove_mode(record.name)
            except ExtensionError as e:
                logger.warning(f"Could not remove mode {record.name}: {e.message}")
            raise

    def in_use(self) -> Set[str]:
        """Names of modes currently driving an active output."""
        return {
            output.mode
            for output in self.backend.query_outputs()
            if output.active and output.mode
        }

    def purge_all(self) -> PurgeResult:
        """Remove every managed mode that no active output uses.

        Modes still in use are reported as skipped rather than failing.

        Raises:
            ExtensionError: If the backend fails to remove a mode
        """
        result = PurgeResult()
        used = self.in_use()

        for record in self.list_modes(managed_only=True):
            if record.name in used:
                logger.warning(f"Skipping mode {record.name}: still used by an active output")
                result.skipped.append(record.name)
                continue
            self.backend.remove_mode(record.name)
            result.removed.append(record.name)

        logger.info(f"Purged {result.removed_count} mode(s), skipped {len(result.skipped)}")
        return result
