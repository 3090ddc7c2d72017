"""Tests for DocsGenerator: single pages, categories and --all batches."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from fhevm_scaffold.errors import MissingArtifactError, NotFoundError
from fhevm_scaffold.materializer import DocsGenerator, ItemStatus
from fhevm_scaffold.registry import ExampleRegistry

pytestmark = pytest.mark.unit


@pytest.fixture
def generator(registry, config) -> DocsGenerator:
    return DocsGenerator(registry, config)


class TestGenerate:
    @pytest.mark.asyncio
    async def test_default_output_and_summary(self, generator, config):
        path = await generator.generate("fhe-counter")
        assert path == config.docs_path / "fhe-counter.md"
        assert '{% tab title="FHECounter.sol" %}' in path.read_text(encoding="utf-8")
        summary = config.summary_path.read_text(encoding="utf-8")
        assert "- [FHE Counter](fhe-counter.md)" in summary

    @pytest.mark.asyncio
    async def test_explicit_output_links_relatively(self, generator, config, tmp_path):
        output = config.docs_path / "basic" / "counter.md"
        await generator.generate("fhe-counter", output)
        assert output.exists()
        assert "(basic/counter.md)" in config.summary_path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_no_summary(self, generator, config):
        await generator.generate("fhe-add", update_summary=False)
        assert not config.summary_path.exists()

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, generator, config):
        await generator.generate("fhe-counter")
        page = (config.docs_path / "fhe-counter.md").read_bytes()
        summary = config.summary_path.read_bytes()
        await generator.generate("fhe-counter")
        assert (config.docs_path / "fhe-counter.md").read_bytes() == page
        assert config.summary_path.read_bytes() == summary

    @pytest.mark.asyncio
    async def test_unknown_example(self, generator, config):
        with pytest.raises(NotFoundError):
            await generator.generate("nope")
        assert not config.docs_path.exists()

    @pytest.mark.asyncio
    async def test_missing_artifact(self, generator, config, source_root):
        (source_root / "contracts/basic/FHEAdd.sol").write_text("", encoding="utf-8")
        with pytest.raises(MissingArtifactError):
            await generator.generate("fhe-add")
        assert not (config.docs_path / "fhe-add.md").exists()


class TestBatches:
    @pytest.mark.asyncio
    async def test_all_visits_every_example_once(self, generator, registry, config):
        report = await generator.generate_all()
        assert [o.identifier for o in report.outcomes] == registry.example_ids()
        assert len(report.succeeded) + len(report.failed) == len(registry)
        assert report.exit_code == 0
        summary = config.summary_path.read_text(encoding="utf-8")
        for example in registry.all_examples():
            assert summary.count(f"({example.name}.md)") == 1

    @pytest.mark.asyncio
    async def test_all_continues_past_failures(self, generator, registry, source_root):
        (source_root / "contracts/basic/FHECounter.sol").unlink()
        report = await generator.generate_all()
        assert [o.identifier for o in report.failed] == ["fhe-counter"]
        assert [o.identifier for o in report.succeeded] == ["fhe-add", "acl"]
        assert "Contract file not found" in report.failed[0].error
        assert report.tally() == "2 succeeded, 1 failed"
        assert report.exit_code == 1

    @pytest.mark.asyncio
    async def test_failed_items_not_indexed(self, generator, config, source_root):
        (source_root / "contracts/basic/FHECounter.sol").unlink()
        await generator.generate_all()
        summary = config.summary_path.read_text(encoding="utf-8")
        assert "fhe-counter.md" not in summary
        assert "(fhe-add.md)" in summary

    @pytest.mark.asyncio
    async def test_stop_event_skips_remaining(self, generator, registry):
        stop = asyncio.Event()
        stop.set()
        report = await generator.generate_all(stop=stop)
        assert report.total == len(registry)
        assert len(report.skipped) == len(registry)
        assert report.interrupted
        assert report.exit_code == 1

    @pytest.mark.asyncio
    async def test_category_batch(self, generator, config):
        report = await generator.generate_category("basic", update_summary=False)
        assert [o.identifier for o in report.outcomes] == ["fhe-counter", "fhe-add"]
        assert all(o.status is ItemStatus.OK for o in report.outcomes)
        assert not config.summary_path.exists()

    @pytest.mark.asyncio
    async def test_unknown_category(self, generator):
        with pytest.raises(NotFoundError):
            await generator.generate_category("nope")

    @pytest.mark.asyncio
    async def test_invalid_registry_flagged(self, config, registry_data):
        registry_data["categories"][0]["examples"].append("ghost")
        registry = ExampleRegistry.from_dict(registry_data)
        report = await DocsGenerator(registry, config).generate_all(update_summary=False)
        assert report.registry_valid is False
        assert report.exit_code == 1

    @pytest.mark.asyncio
    async def test_dangling_category_member_recorded_as_failure(self, config, registry_data):
        registry_data["categories"][0]["examples"].append("ghost")
        registry = ExampleRegistry.from_dict(registry_data)
        report = await DocsGenerator(registry, config).generate_category("basic")
        assert [o.identifier for o in report.failed] == ["ghost"]
        assert len(report.succeeded) == 2
