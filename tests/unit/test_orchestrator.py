"""Unit tests for the orchestrator's tier sequencing and public operations."""

import io
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from logosmith.core.config import Config
from logosmith.core.models import (
    KIND_ENHANCE,
    KIND_GENERATE_REFERENCE,
    KIND_GENERATE_TEXT,
    BusinessProfile,
    EnhancementOptions,
    GenerationRequest,
    ReferenceOptions,
    TextOptions,
)
from logosmith.core.orchestrator import Orchestrator
from logosmith.core.providers.gemini import GeminiImageClient
from logosmith.core.providers.groq import GroqReasoningClient
from logosmith.utils.exceptions import (
    NotFoundError,
    OperationError,
    ProcessingError,
    RemoteServiceError,
    ValidationError,
)


def _png(size=(64, 64), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeImageBackend:
    """Records calls; returns a fixed PNG or raises the configured error."""

    model = "fake-image-model"

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple] = []
        self.image = _png()

    def text_to_image(self, instruction: str) -> bytes:
        self.calls.append(("text", instruction))
        if self.error is not None:
            raise self.error
        return self.image

    def edit_image(self, instruction: str, image: bytes, mime_type: str = "image/png") -> bytes:
        self.calls.append(("edit", instruction, mime_type))
        if self.error is not None:
            raise self.error
        return self.image


class RecordingReasoning:
    model = "fake-reasoning"

    def __init__(self) -> None:
        self.prompts: list[str] = []

    def complete(self, prompt: str, system: str = "") -> str:
        self.prompts.append(prompt)
        return "A bold geometric fox mark for Acme Corp"

    def complete_json(self, prompt: str, system: str = "") -> dict:
        self.prompts.append(prompt)
        return {}


@pytest.fixture
def local_only(store):
    return Orchestrator(store)


@pytest.mark.unit
class TestGenerateFromText:
    def test_synthetic_when_no_remote(self, local_only):
        result = local_only.generate_from_text("Acme Corp tech startup", TextOptions())
        assert result.tier == "synthetic"
        assert result.filename.startswith("fallback-")
        assert result.url == f"/api/logo/download/{result.filename}"
        assert result.artifact.path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
        assert result.metadata.business_name == "Acme Corp"
        assert result.prompt

    def test_remote_success(self, store):
        backend = FakeImageBackend()
        orchestrator = Orchestrator(store, remote=backend)
        result = orchestrator.generate_from_text(
            "a fox for a coffee shop", TextOptions(colors=["orange"])
        )
        assert result.tier == "remote"
        assert result.filename.startswith("gemini-logo-")
        assert result.metadata.model == "fake-image-model"
        assert result.artifact.content == backend.image
        kind, instruction = backend.calls[0]
        assert kind == "text"
        # the refined description flows into the remote instruction
        assert result.prompt.rstrip(".") in instruction

    def test_remote_failure_falls_back_to_synthetic(self, store, caplog):
        backend = FakeImageBackend(error=RemoteServiceError("quota", status_code=429))
        orchestrator = Orchestrator(store, remote=backend)
        with caplog.at_level("WARNING"):
            result = orchestrator.generate_from_text("Acme Corp tech startup")
        assert result.tier == "synthetic"
        assert len(backend.calls) == 1
        assert "falling back" in caplog.text

    @pytest.mark.parametrize("description", ["", "   "])
    def test_blank_description(self, local_only, description):
        with pytest.raises(ValidationError) as exc_info:
            local_only.generate_from_text(description)
        assert exc_info.value.field == "description"

    def test_malformed_remote_payload_falls_back_to_synthetic(self, store):
        response = MagicMock(status_code=200, text="{}")
        response.json.return_value = {"candidates": ["not-a-dict"]}
        client = GeminiImageClient(api_key="gem-test-key", model="gemini-test")
        orchestrator = Orchestrator(store, remote=client)
        with patch("logosmith.core.providers.gemini.requests.post", return_value=response):
            result = orchestrator.generate_from_text("A modern logo for TechStart")
        assert result.tier == "synthetic"
        assert result.metadata.business_name == "TechStart"

    def test_refinement_skipped_without_remote_tier(self, store):
        reasoning = RecordingReasoning()
        result = Orchestrator(store, reasoning=reasoning).generate_from_text("Acme Corp")
        assert reasoning.prompts == []
        assert result.prompt.startswith("Acme Corp, modern design style")

    def test_refinement_used_by_remote_tier(self, store):
        reasoning = RecordingReasoning()
        backend = FakeImageBackend()
        result = Orchestrator(store, remote=backend, reasoning=reasoning).generate_from_text(
            "Acme Corp"
        )
        assert len(reasoning.prompts) == 1
        assert result.prompt == "A bold geometric fox mark for Acme Corp"
        assert "A bold geometric fox mark for Acme Corp" in backend.calls[0][1]

    def test_distinct_filenames(self, local_only):
        names = {local_only.generate_from_text("Acme Corp").filename for _ in range(5)}
        assert len(names) == 5


@pytest.mark.unit
class TestEnhance:
    def test_raster_enhance(self, local_only, png_bytes):
        result = local_only.enhance(png_bytes, EnhancementOptions(type="resolution"))
        assert result.tier == "raster"
        assert result.filename.startswith("enhanced-")
        with Image.open(result.artifact.path) as image:
            assert image.size == (1600, 1200)
        assert result.metadata.extra["original"] == {"width": 400, "height": 300, "format": "PNG"}

    def test_remote_enhance(self, store, png_bytes):
        backend = FakeImageBackend()
        result = Orchestrator(store, remote=backend).enhance(
            png_bytes, EnhancementOptions(type="style", style="vintage")
        )
        assert result.tier == "remote"
        assert result.filename.startswith("gemini-enhanced-")
        assert backend.calls[0][0] == "edit"
        assert backend.calls[0][2] == "image/png"

    def test_remote_failure_falls_back_to_raster(self, store, png_bytes):
        backend = FakeImageBackend(error=RemoteServiceError("boom", status_code=500))
        result = Orchestrator(store, remote=backend).enhance(png_bytes)
        assert result.tier == "raster"

    def test_corrupt_input_raises_operation_error(self, local_only):
        with pytest.raises(OperationError) as exc_info:
            local_only.enhance(b"not an image at all")
        err = exc_info.value
        assert err.operation == "enhance"
        assert err.tier == "raster"
        assert isinstance(err.original_error, ProcessingError)

    def test_empty_input(self, local_only):
        with pytest.raises(ValidationError):
            local_only.enhance(b"")

    def test_too_large_input(self, store, png_bytes):
        orchestrator = Orchestrator(store, max_upload_bytes=10)
        with pytest.raises(ValidationError):
            orchestrator.enhance(png_bytes)

    def test_path_input_deleted_on_success(self, local_only, tmp_path, png_bytes):
        upload = tmp_path / "upload.png"
        upload.write_bytes(png_bytes)
        local_only.enhance(upload)
        assert not upload.exists()

    def test_path_input_deleted_on_failure(self, local_only, tmp_path):
        upload = tmp_path / "upload.png"
        upload.write_bytes(b"garbage")
        with pytest.raises(OperationError):
            local_only.enhance(str(upload))
        assert not upload.exists()

    def test_unknown_type_rejected_and_input_deleted(self, local_only, tmp_path, png_bytes):
        upload = tmp_path / "upload.png"
        upload.write_bytes(png_bytes)
        with pytest.raises(ValidationError) as exc_info:
            local_only.enhance(upload, EnhancementOptions(type="sparkle"))
        assert exc_info.value.field == "type"
        assert not upload.exists()


@pytest.mark.unit
class TestGenerateFromReference:
    def test_raster_reference_with_analysis(self, local_only, png_bytes):
        options = ReferenceOptions(business_name="Acme", modifications=["bolder"])
        result = local_only.generate_from_reference(png_bytes, options)
        assert result.tier == "raster"
        assert result.filename.startswith("reference-based-")
        with Image.open(result.artifact.path) as image:
            assert image.size == (1024, 1024)
        assert result.analysis is not None
        assert result.analysis["width"] == 400
        assert result.metadata.business_name == "Acme"
        assert result.to_dict()["analysis"] == result.analysis

    def test_remote_reference(self, store, image_bytes):
        backend = FakeImageBackend()
        jpeg = image_bytes(fmt="JPEG")
        result = Orchestrator(store, remote=backend).generate_from_reference(
            jpeg, ReferenceOptions(business_name="Acme Corp", style="vintage")
        )
        assert result.tier == "remote"
        assert result.filename.startswith("gemini-edited-logo-")
        _, instruction, mime_type = backend.calls[0]
        assert mime_type == "image/jpeg"
        assert "Acme Corp" in instruction

    def test_corrupt_reference_still_analyzed_then_fails(self, local_only):
        with pytest.raises(OperationError) as exc_info:
            local_only.generate_from_reference(b"garbage bytes")
        assert exc_info.value.operation == "generate_from_reference"


@pytest.mark.unit
class TestRunAndDownload:
    def test_run_dispatches(self, local_only, png_bytes):
        text = local_only.run(GenerationRequest(kind=KIND_GENERATE_TEXT, description="Acme"))
        assert text.tier == "synthetic"
        enhanced = local_only.run(GenerationRequest(kind=KIND_ENHANCE, image=png_bytes))
        assert enhanced.tier == "raster"

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            GenerationRequest(kind="paint")

    def test_options_must_match_kind(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerationRequest(kind=KIND_ENHANCE, image=b"x", options=TextOptions())
        assert exc_info.value.field == "options"

    def test_run_rejects_options_swapped_after_construction(self, local_only, png_bytes):
        request = GenerationRequest(kind=KIND_ENHANCE, image=png_bytes)
        request.options = None
        with pytest.raises(ValidationError) as exc_info:
            local_only.run(request)
        assert exc_info.value.field == "options"

    def test_tiers_only_receive_kinds_they_handle(self, store):
        orchestrator = Orchestrator(store, remote=FakeImageBackend())
        for kind in (KIND_ENHANCE, KIND_GENERATE_TEXT, KIND_GENERATE_REFERENCE):
            assert all(kind in tier.kinds for tier in orchestrator.tiers_for(kind))
        assert [t.name for t in orchestrator.tiers_for(KIND_GENERATE_REFERENCE)] == [
            "remote",
            "raster",
        ]

    def test_download_round_trip(self, local_only):
        result = local_only.generate_from_text("Acme Corp")
        assert local_only.download(result.filename) == result.artifact.content
        assert b"".join(local_only.open_artifact(result.filename, 100)) == result.artifact.content

    @pytest.mark.parametrize("name", ["missing.png", "../secret.png", ""])
    def test_download_missing(self, local_only, name):
        with pytest.raises(NotFoundError):
            local_only.download(name)


@pytest.mark.unit
class TestBusinessOperations:
    def test_analyze_business_fallback(self, local_only):
        result = local_only.analyze_business(BusinessProfile(name="Acme", type="tech"))
        assert "modern" in result["style_suggestions"]

    def test_describe_business(self, local_only):
        text = local_only.describe_business(BusinessProfile(name="Acme", type="tech"))
        assert "Acme" in text
        assert "tech" in text


@pytest.mark.unit
class TestConstruction:
    def test_status_local_only(self, local_only, store):
        status = local_only.status()
        assert status["tiers"]["remote"] == {"available": False, "model": None}
        assert status["tiers"]["raster"]["available"] is True
        assert status["tiers"]["synthetic"]["available"] is True
        assert status["reasoning"]["available"] is False
        assert status["output_dir"] == str(store.root)

    def test_tiers_for(self, store):
        orchestrator = Orchestrator(store, remote=FakeImageBackend())
        assert [t.name for t in orchestrator.tiers_for(KIND_GENERATE_TEXT)] == [
            "remote",
            "synthetic",
        ]
        assert [t.name for t in orchestrator.tiers_for(KIND_ENHANCE)] == ["remote", "raster"]

    def test_from_config_without_keys(self, tmp_path, caplog):
        config = Config(output_dir=tmp_path)
        with caplog.at_level("WARNING"):
            orchestrator = Orchestrator.from_config(config)
        assert orchestrator.remote is None
        assert orchestrator.reasoning is None
        assert "Remote tier disabled" in caplog.text

    def test_from_config_with_keys(self, tmp_path):
        config = Config(output_dir=tmp_path, gemini_api_key="g", groq_api_key="q")
        orchestrator = Orchestrator.from_config(config)
        assert isinstance(orchestrator.remote, GeminiImageClient)
        assert isinstance(orchestrator.reasoning, GroqReasoningClient)
        assert orchestrator.enhancer.reasoning_available
        assert orchestrator.status()["tiers"]["remote"]["available"] is True

    def test_from_config_reasoning_disabled(self, tmp_path):
        config = Config(output_dir=tmp_path, groq_api_key="q", reasoning_enabled=False)
        assert Orchestrator.from_config(config).reasoning is None
