"""Tests for batch orchestration: fan-out, ordering, completion, failures."""

import asyncio
from pathlib import Path

import httpx
import pytest

from csvtranslator.backends.base import (
    TranslationBackend,
    TranslationResult,
    TranslationWarning,
    WarningKind,
)
from csvtranslator.backends.dummy import DummyBackend
from csvtranslator.core.rows import Row
from csvtranslator.pipeline import (
    JobState,
    UnknownLanguageError,
    translate_file,
    translate_file_async,
    translate_rows,
)
from tests.conftest import DelayedBackend, make_google_backend, phrase_body


class FailingBackend(TranslationBackend):
    """Fails for texts in ``fail``, raises for texts in ``explode``."""

    def __init__(self, fail=(), explode=(), hang=(), warn=()) -> None:
        self.fail = set(fail)
        self.explode = set(explode)
        self.hang = set(hang)
        self.warn = set(warn)

    async def translate(self, text, source_language, target_language):
        if text in self.explode:
            raise RuntimeError(f"backend crashed on {text}")
        if text in self.hang:
            await asyncio.sleep(10)
        if text in self.fail:
            return TranslationResult(error=RuntimeError("boom"))
        warnings = []
        if text in self.warn:
            warnings.append(TranslationWarning(WarningKind.UNKNOWN_TOKEN, "{3}"))
        return TranslationResult(text=f"<{text}>", warnings=warnings)


ROWS = [Row("a", "one"), Row("b", "two"), Row("c", "three"), Row("d", "four")]


class TestTranslateRows:
    def test_output_order_independent_of_completion_order(self):
        # Completion order: four, three, two, one
        backend = DelayedBackend({"one": 0.04, "two": 0.03, "three": 0.02, "four": 0.0})
        progress: list[tuple[int, int, str]] = []

        batch = asyncio.run(translate_rows(
            ROWS, "English", "French", backend,
            on_progress=lambda done, total, line: progress.append((done, total, line)),
        ))

        assert batch.output == ['a,"ONE"', 'b,"TWO"', 'c,"THREE"', 'd,"FOUR"']
        assert [p[2] for p in progress] == ['d,"FOUR"', 'c,"THREE"', 'b,"TWO"', 'a,"ONE"']
        assert [p[0] for p in progress] == [1, 2, 3, 4]
        assert {p[1] for p in progress} == {4}

    def test_all_rows_dispatched_before_any_completes(self):
        backend = DelayedBackend({text: 0.01 for text in ("one", "two", "three", "four")})
        seen_at_first_completion: list[int] = []

        def on_progress(done, total, line):
            if done == 1:
                seen_at_first_completion.append(len(backend.calls))

        asyncio.run(translate_rows(ROWS, "English", "French", backend, on_progress=on_progress))
        assert seen_at_first_completion == [4]

    def test_counts(self):
        batch = asyncio.run(translate_rows(
            ROWS, "English", "French", DummyBackend(), total_lines=6,
        ))
        assert batch.rows_dispatched == 4
        assert batch.rows_translated == 4
        assert batch.rows_failed == 0
        assert batch.rows_skipped == 2
        assert batch.total_lines == 6
        assert batch.errors == []

    def test_empty_rows(self):
        calls: list[tuple] = []
        batch = asyncio.run(translate_rows(
            [], "English", "French", DummyBackend(),
            on_progress=lambda *args: calls.append(args),
        ))
        assert batch.output == []
        assert batch.rows_dispatched == 0
        assert calls == []

    def test_failed_row_counts_toward_completion(self):
        progress: list[int] = []
        batch = asyncio.run(translate_rows(
            ROWS, "English", "French", FailingBackend(fail={"two"}),
            on_progress=lambda done, total, line: progress.append(done),
        ))
        assert progress == [1, 2, 3, 4]
        assert batch.output == ['a,"<one>"', 'b,""', 'c,"<three>"', 'd,"<four>"']
        assert batch.rows_failed == 1
        assert batch.rows_translated == 3
        assert batch.errors == [("b", "boom")]

    def test_backend_exception_captured(self):
        batch = asyncio.run(translate_rows(
            ROWS, "English", "French", FailingBackend(explode={"three"}),
        ))
        assert batch.output[2] == 'c,""'
        assert batch.rows_failed == 1
        assert "backend crashed on three" in batch.errors[0][1]

    def test_timeout_marks_row_failed(self):
        batch = asyncio.run(translate_rows(
            ROWS, "English", "French", FailingBackend(hang={"one"}), timeout=0.05,
        ))
        assert batch.output[0] == 'a,""'
        assert batch.output[1:] == ['b,"<two>"', 'c,"<three>"', 'd,"<four>"']
        assert batch.errors[0][0] == "a"
        assert "Timed out" in batch.errors[0][1]

    def test_warnings_collected_but_row_kept(self):
        batch = asyncio.run(translate_rows(
            ROWS, "English", "French", FailingBackend(warn={"two"}),
        ))
        assert batch.output[1] == 'b,"<two>"'
        assert batch.rows_failed == 0
        assert batch.warnings == [("b", TranslationWarning(WarningKind.UNKNOWN_TOKEN, "{3}"))]

    def test_strict_fails_rows_with_warnings(self):
        batch = asyncio.run(translate_rows(
            ROWS, "English", "French", FailingBackend(warn={"two"}), strict=True,
        ))
        assert batch.output[1] == 'b,""'
        assert batch.rows_failed == 1
        assert batch.errors[0][0] == "b"
        assert "strict" in batch.errors[0][1]

    def test_strict_rejects_unknown_language_before_dispatch(self):
        backend = DelayedBackend()
        with pytest.raises(UnknownLanguageError, match="Klingon"):
            asyncio.run(translate_rows(ROWS, "English", "Klingon", backend, strict=True))
        assert backend.calls == []

    def test_translation_seconds_summed(self):
        backend = DelayedBackend({"one": 0.01, "two": 0.02})
        batch = asyncio.run(translate_rows(ROWS[:2], "English", "French", backend))
        assert batch.translation_seconds == pytest.approx(0.03)


class TestJobStates:
    def test_jobs_end_complete_or_failed(self, monkeypatch):
        import csvtranslator.pipeline as pipeline

        created: list[pipeline.TranslationJob] = []
        original = pipeline.TranslationJob

        def tracking_job(*args, **kwargs):
            job = original(*args, **kwargs)
            assert job.state == JobState.PENDING
            created.append(job)
            return job

        monkeypatch.setattr(pipeline, "TranslationJob", tracking_job)
        asyncio.run(translate_rows(ROWS, "English", "French", FailingBackend(fail={"one"})))

        assert [job.slot for job in created] == [0, 1, 2, 3]
        assert [job.state for job in created] == [
            JobState.FAILED, JobState.COMPLETE, JobState.COMPLETE, JobState.COMPLETE,
        ]


class TestTranslateFile:
    def test_writes_derived_output_file(self, write_input):
        path = write_input(["greeting,Hello", "not a row", 'farewell,"Good bye, friend"'])
        done: list = []

        batch = translate_file(
            path, "English", "French",
            on_done=done.append,
            backend=DummyBackend(),
        )

        expected = path.with_name("strings-fr.csv")
        assert batch.output_file == str(expected)
        assert expected.read_text(encoding="utf-8") == (
            'greeting,"[FR] Hello"\n'
            'farewell,"[FR] Good bye, friend"\n'
        )
        assert done == [batch]
        assert batch.total_lines == 3
        assert batch.rows_skipped == 1

    def test_finalizes_exactly_once_with_permuted_completion(self, write_input):
        path = write_input([f"k{i},text{i}" for i in range(8)])
        delays = {f"text{i}": (8 - i) * 0.005 for i in range(8)}
        done: list = []
        progress: list[int] = []

        batch = translate_file(
            path, "English", "German",
            on_progress=lambda n, total, line: progress.append(n),
            on_done=done.append,
            backend=DelayedBackend(delays),
        )

        assert len(done) == 1
        assert progress == list(range(1, 9))
        lines = Path(batch.output_file).read_text(encoding="utf-8").splitlines()
        assert lines == [f'k{i},"TEXT{i}"' for i in range(8)]

    def test_unknown_target_uses_name_in_filename(self, write_input):
        path = write_input(["a,Hello"])
        batch = translate_file(path, "English", "Klingon", backend=DummyBackend())
        assert Path(batch.output_file).name == "strings-Klingon.csv"

    def test_explicit_output_path(self, write_input, tmp_path):
        path = write_input(["a,Hello"])
        out = tmp_path / "custom.txt"
        batch = translate_file(path, "English", "Spanish", backend=DummyBackend(), output=out)
        assert batch.output_file == str(out)
        assert out.read_text(encoding="utf-8") == 'a,"[ES] Hello"\n'

    def test_end_to_end_with_google_backend(self, write_input):
        path = write_input(['title,"Score: {score}"', "bye,Goodbye"])
        translations = {"Score: {1}": "Note : {1}", "Goodbye": "Au revoir"}

        def handler(request: httpx.Request) -> httpx.Response:
            q = request.url.params["q"]
            return httpx.Response(200, text=phrase_body(translations[q], q))

        async def run():
            async with make_google_backend(handler) as backend:
                return await translate_file_async(path, "English", "French", backend=backend)

        batch = asyncio.run(run())

        assert Path(batch.output_file).read_text(encoding="utf-8") == (
            'title,"Note : {score}"\n'
            'bye,"Au revoir"\n'
        )
        assert batch.rows_failed == 0

    def test_network_failures_still_finalize(self, write_input):
        path = write_input(["a,Hello", "b,World"])

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["q"] == "World":
                raise httpx.ConnectError("offline", request=request)
            return httpx.Response(200, text=phrase_body("Bonjour", "Hello"))

        done: list = []

        async def run():
            async with make_google_backend(handler) as backend:
                return await translate_file_async(
                    path, "English", "French", on_done=done.append, backend=backend,
                )

        batch = asyncio.run(run())

        assert len(done) == 1
        assert Path(batch.output_file).read_text(encoding="utf-8") == 'a,"Bonjour"\nb,""\n'
        assert batch.errors[0][0] == "b"

    def test_strict_unknown_language_writes_nothing(self, write_input):
        path = write_input(["a,Hello"])
        done: list = []
        with pytest.raises(UnknownLanguageError):
            translate_file(
                path, "Elvish", "French", on_done=done.append,
                backend=DummyBackend(), strict=True,
            )
        assert done == []
        assert not path.with_name("strings-fr.csv").exists()
