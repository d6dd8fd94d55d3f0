"""Tests for the concurrent scan scheduler and scan sessions."""

import logging
import threading
from pathlib import Path

import pytest

from define_extractor.core.exceptions import ScanError
from define_extractor.scanning.line_cache import LineCountCache
from define_extractor.scanning.scheduler import (
    FALLBACK_WORKERS,
    ProgressThrottle,
    ScanCursor,
    ScanScheduler,
    ScanSession,
    scan_files,
)
from define_extractor.scanning.types import CodeBlock, Dialect, ScanResult


def _fake_scan(path: str) -> ScanResult:
    return ScanResult(conditional_blocks=[CodeBlock(source_file=path, text="x\n")])


def _write_sources(root: Path, count: int) -> list[str]:
    files = []
    for i in range(count):
        path = root / f"unit{i}.cpp"
        path.write_text(
            f"void f{i}() {{\n#ifdef FOO\nint v{i};\n#endif\n}}\nint tail{i};\n",
            encoding="utf-8",
        )
        files.append(str(path))
    return files


class TestWorkerCount:
    """Tests for ScanScheduler.worker_count."""

    def test_capped_by_file_count(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("define_extractor.scanning.scheduler.os.cpu_count", lambda: 8)
        assert ScanScheduler().worker_count(3) == 3

    def test_capped_by_cpu_count(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("define_extractor.scanning.scheduler.os.cpu_count", lambda: 4)
        assert ScanScheduler().worker_count(100) == 4

    def test_capped_by_max_workers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("define_extractor.scanning.scheduler.os.cpu_count", lambda: 16)
        assert ScanScheduler(max_workers=2).worker_count(100) == 2

    def test_unknown_cpu_count_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("define_extractor.scanning.scheduler.os.cpu_count", lambda: None)
        assert ScanScheduler().worker_count(100) == FALLBACK_WORKERS

    def test_no_files_no_workers(self) -> None:
        assert ScanScheduler().worker_count(0) == 0

    @pytest.mark.parametrize("value", [0, -1])
    def test_invalid_max_workers(self, value: int) -> None:
        with pytest.raises(ValueError, match="max_workers"):
            ScanScheduler(max_workers=value)


class TestScanCursor:
    """Tests for ScanCursor."""

    def test_claims_are_distinct_across_threads(self) -> None:
        cursor = ScanCursor()
        claimed: list[int] = []
        lock = threading.Lock()

        def claim_many() -> None:
            for _ in range(250):
                index = cursor.claim()
                with lock:
                    claimed.append(index)

        threads = [threading.Thread(target=claim_many) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(claimed) == list(range(1000))
        assert cursor.value == 1000


class TestScanSchedulerRun:
    """Tests for ScanScheduler.run."""

    def test_empty_file_list(self) -> None:
        calls: list[str] = []

        def scan_fn(path: str) -> ScanResult:
            calls.append(path)
            return ScanResult()

        result = ScanScheduler().run([], scan_fn)

        assert result.empty
        assert calls == []

    def test_single_worker_preserves_file_order(self) -> None:
        files = [f"f{i}.cpp" for i in range(10)]
        result = ScanScheduler(max_workers=1).run(files, _fake_scan)

        assert [b.source_file for b in result.conditional_blocks] == files

    def test_every_file_scanned_once_with_many_workers(self) -> None:
        files = [f"f{i}.cpp" for i in range(50)]
        seen: list[str] = []
        lock = threading.Lock()

        def scan_fn(path: str) -> ScanResult:
            with lock:
                seen.append(path)
            return _fake_scan(path)

        result = ScanScheduler(max_workers=8).run(files, scan_fn)

        assert sorted(seen) == sorted(files)
        assert sorted(b.source_file for b in result.conditional_blocks) == sorted(files)

    def test_failing_file_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        done: list[str] = []

        def scan_fn(path: str) -> ScanResult:
            if path == "bad.cpp":
                raise RuntimeError("boom")
            return _fake_scan(path)

        with caplog.at_level(logging.WARNING):
            result = ScanScheduler(max_workers=2).run(
                ["a.cpp", "bad.cpp", "b.cpp"], scan_fn, on_file_done=done.append
            )

        assert sorted(b.source_file for b in result.conditional_blocks) == ["a.cpp", "b.cpp"]
        assert sorted(done) == ["a.cpp", "b.cpp", "bad.cpp"]
        assert any("bad.cpp" in r.getMessage() for r in caplog.records)

    def test_worker_failure_raises_scan_error(self) -> None:
        def on_file_done(path: str) -> None:
            raise RuntimeError("hook failed")

        with pytest.raises(ScanError, match="hook failed"):
            ScanScheduler(max_workers=1).run(["a.cpp"], _fake_scan, on_file_done=on_file_done)


class TestProgressThrottle:
    """Tests for ProgressThrottle rate limiting."""

    def test_rate_limits_updates(self) -> None:
        now = [0.0]
        calls: list[tuple[int, int]] = []
        throttle = ProgressThrottle(
            lambda p, t: calls.append((p, t)), interval=0.1, clock=lambda: now[0]
        )

        assert throttle.update(1, 10) is True
        now[0] = 0.05
        assert throttle.update(2, 10) is False
        now[0] = 0.15
        assert throttle.update(3, 10) is True

        assert calls == [(1, 10), (3, 10)]

    def test_finish_always_forwards(self) -> None:
        calls: list[tuple[int, int]] = []
        throttle = ProgressThrottle(
            lambda p, t: calls.append((p, t)), interval=60.0, clock=lambda: 0.0
        )

        throttle.update(1, 10)
        throttle.finish(10, 10)

        assert calls == [(1, 10), (10, 10)]

    def test_stale_update_is_dropped(self) -> None:
        now = [0.0]
        calls: list[tuple[int, int]] = []
        throttle = ProgressThrottle(
            lambda p, t: calls.append((p, t)), interval=0.1, clock=lambda: now[0]
        )

        throttle.update(50, 100)
        now[0] = 1.0
        assert throttle.update(30, 100) is False
        now[0] = 2.0
        assert throttle.update(60, 100) is True

        assert calls == [(50, 100), (60, 100)]

    def test_forwarded_values_never_decrease_across_threads(self) -> None:
        forwarded: list[int] = []
        throttle = ProgressThrottle(lambda p, t: forwarded.append(p), interval=0.0)
        barrier = threading.Barrier(4)

        def report(offset: int) -> None:
            barrier.wait()
            for step in range(200):
                throttle.update(step * 4 + offset, 800)

        threads = [threading.Thread(target=report, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert forwarded
        assert forwarded == sorted(forwarded)


class TestScanSession:
    """Tests for ScanSession and scan_files."""

    def test_finds_blocks_across_files(self, tmp_path: Path) -> None:
        files = _write_sources(tmp_path, 5)

        result = ScanSession(files, "FOO", Dialect.BRACE).run()

        assert len(result.conditional_blocks) == 5
        assert len(result.function_blocks) == 5
        assert result.source_files() == sorted(files)

    def test_worker_count_does_not_change_blocks(self, tmp_path: Path) -> None:
        files = _write_sources(tmp_path, 12)

        def keys(result: ScanResult) -> list[tuple[str, str, int]]:
            blocks = result.conditional_blocks + result.function_blocks
            return sorted((b.source_file, b.kind, b.start_line) for b in blocks)

        single = ScanSession(files, "FOO", Dialect.BRACE, max_workers=1).run()
        many = ScanSession(files, "FOO", Dialect.BRACE, max_workers=4).run()

        assert keys(single) == keys(many)

    def test_progress_reports_lines(self, tmp_path: Path) -> None:
        files = _write_sources(tmp_path, 3)
        calls: list[tuple[int, int]] = []

        ScanSession(
            files,
            "FOO",
            Dialect.BRACE,
            progress=lambda p, t: calls.append((p, t)),
            progress_interval=0.0,
        ).run()

        assert calls[-1] == (18, 18)
        assert all(total == 18 for _, total in calls)

    def test_no_progress_skips_line_counting(self, tmp_path: Path) -> None:
        files = _write_sources(tmp_path, 2)
        cache = LineCountCache()

        ScanSession(files, "FOO", Dialect.BRACE, line_counts=cache).run()

        assert len(cache) == 0

    def test_shared_line_cache_is_filled(self, tmp_path: Path) -> None:
        files = _write_sources(tmp_path, 2)
        cache = LineCountCache()

        ScanSession(
            files, "FOO", Dialect.BRACE, progress=lambda p, t: None, line_counts=cache
        ).run()

        assert len(cache) == 2

    def test_invalid_symbol_raises(self) -> None:
        with pytest.raises(ValueError):
            ScanSession([], "  ", Dialect.BRACE)

    def test_scan_files_indent_dialect(self, tmp_path: Path) -> None:
        path = tmp_path / "views.py"
        path.write_text(
            "def view():\n    if app.DEBUG:\n        trace()\n    return 1\n", encoding="utf-8"
        )

        result = scan_files([path], "DEBUG", "indent", max_workers=1)

        assert len(result.conditional_blocks) == 1
        assert len(result.function_blocks) == 1
        assert result.function_blocks[0].source_file == str(path)
