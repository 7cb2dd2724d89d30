from pathlib import Path

import pytest

from magicslide.delivery import FileSystemDelivery
from magicslide.errors import DeliveryFailure
from magicslide.models import PPTX_MEDIA_TYPE, Artifact


def _artifact(data: bytes = b"PK" + b"\0" * 4000) -> Artifact:
    return Artifact(data=data, media_type=PPTX_MEDIA_TYPE, extension=".pptx", backend="ooxml")


def test_deliver_writes_bytes(tmp_path):
    delivery = FileSystemDelivery(tmp_path / "out")
    artifact = _artifact()

    target = delivery.deliver(artifact, artifact.suggested_file_name("Board Update"))

    assert target == tmp_path / "out" / "Board Update.pptx"
    assert target.read_bytes() == artifact.data


def test_deliver_ignores_directory_components(tmp_path):
    target = FileSystemDelivery(tmp_path).deliver(_artifact(), "../../escape.pptx")

    assert target == tmp_path / "escape.pptx"


def test_empty_artifact_is_refused(tmp_path):
    with pytest.raises(DeliveryFailure) as excinfo:
        FileSystemDelivery(tmp_path).deliver(_artifact(b""), "empty.pptx")

    assert not excinfo.value.retryable


def test_write_errors_become_delivery_failures(tmp_path, monkeypatch):
    def deny(self, data):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(Path, "write_bytes", deny)

    with pytest.raises(DeliveryFailure) as excinfo:
        FileSystemDelivery(tmp_path).deliver(_artifact(), "deck.pptx")

    assert excinfo.value.retryable
    assert isinstance(excinfo.value.original_error, PermissionError)
    assert "Permission denied" in excinfo.value.message
