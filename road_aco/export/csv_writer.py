"""CSV export functionality for the road ACO simulation."""

import csv
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model.state import SimulationState


class CSVWriter:
    """
    Logs every cycle to two CSV files: one row per agent and one row per colony.

    Agent log:
        time,cycle,agent_id,colony,node,x,y,state
        1500.0,10,1,North,0,101.2,98.7,idle

    Colony log (next to the agent log unless colony_path is given):
        time,cycle,colony,spawned,arrived,active,quota
        1500.0,10,North,1,0,1,35
    """

    FIELDNAMES = ['time', 'cycle', 'agent_id', 'colony', 'node', 'x', 'y', 'state']
    COLONY_FIELDNAMES = ['time', 'cycle', 'colony', 'spawned', 'arrived', 'active', 'quota']

    def __init__(self, output_path: Path, colony_path: Optional[Path] = None):
        self.output_path = Path(output_path)
        if colony_path is None:
            colony_path = self.output_path.with_name(
                f"{self.output_path.stem}_colonies{self.output_path.suffix}")
        self.colony_path = Path(colony_path)
        self._files = []
        self._agents: Optional[csv.DictWriter] = None
        self._colonies: Optional[csv.DictWriter] = None

    @property
    def is_open(self) -> bool:
        return bool(self._files)

    def _start(self, path: Path, fieldnames) -> csv.DictWriter:
        path.parent.mkdir(parents=True, exist_ok=True)
        f = open(path, 'w', newline='')
        self._files.append(f)
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        return writer

    def open(self) -> None:
        """Create both files and write their headers."""
        if self.is_open:
            return
        try:
            self._agents = self._start(self.output_path, self.FIELDNAMES)
            self._colonies = self._start(self.colony_path, self.COLONY_FIELDNAMES)
        except OSError:
            self.close()
            raise

    def append(self, state: "SimulationState") -> None:
        """Write agent and colony rows for one cycle."""
        if not self.is_open:
            self.open()
        self._agents.writerows(state.to_csv_rows())
        self._colonies.writerows(state.colony_csv_rows())
        for f in self._files:
            f.flush()

    def close(self) -> None:
        for f in self._files:
            f.close()
        self._files = []
        self._agents = None
        self._colonies = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
