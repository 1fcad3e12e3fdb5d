"""Unit tests for the one-shot result cell."""

import threading

from reclaim.privilege.cell import ResultCell


class TestResultCell:
    """Tests for ResultCell."""

    def test_first_writer_wins(self) -> None:
        """Later resolutions are discarded."""
        cell: ResultCell[str] = ResultCell()

        assert cell.resolve("reply")
        assert not cell.resolve("error")
        assert cell.value == "reply"

    def test_wait_times_out(self) -> None:
        """An unresolved cell returns None after the timeout."""
        cell: ResultCell[str] = ResultCell()

        assert cell.wait(0.01) is None
        assert not cell.is_resolved

    def test_wait_returns_value_from_other_thread(self) -> None:
        """Values written by another thread wake the waiter."""
        cell: ResultCell[int] = ResultCell()
        threading.Timer(0.01, cell.resolve, args=(42,)).start()

        assert cell.wait(5) == 42

    def test_concurrent_writers_agree(self) -> None:
        """Exactly one of many racing writers wins."""
        cell: ResultCell[int] = ResultCell()
        wins: list[int] = []
        barrier = threading.Barrier(8)

        def write(value: int) -> None:
            barrier.wait()
            if cell.resolve(value):
                wins.append(value)

        threads = [threading.Thread(target=write, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(wins) == 1
        assert cell.value == wins[0]
