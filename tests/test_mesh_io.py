import io

import numpy as np
import pytest

from grid_morph.core.exceptions import (
    MeshFormatError,
    MeshLoadError,
    MeshTruncatedError,
)
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.mesh_io import (
    load_mesh,
    mesh_from_string,
    mesh_to_string,
    read_mesh,
    round_half_away,
    save_mesh,
    write_mesh,
)


def stepped_mesh():
    """5x4 mesh with column step 1.25 and row step 1.75."""
    xs, ys = np.meshgrid(np.arange(5) * 1.25, np.arange(4) * 1.75)
    return MeshGrid.from_arrays(xs, ys)


def test_round_half_away():
    assert round_half_away(12.5) == 13
    assert round_half_away(-12.5) == -13
    assert round_half_away(12.49) == 12
    assert round_half_away(0.0) == 0


def test_write_exact_lines():
    lines = mesh_to_string(stepped_mesh()).splitlines()
    assert lines[0] == "M2"
    assert lines[1] == "5 4"
    assert lines[2:9] == ["0 0 0", "13 0 0", "25 0 0", "38 0 0", "50 0 0", "0 18 0", "13 18 0"]
    assert lines[21] == "50 53 0"
    assert lines[22] == "<SIS>"


def test_write_trailer_from_bounding_box():
    text = mesh_to_string(stepped_mesh())
    trailer = text.splitlines()[22:]
    assert trailer[:8] == ["<SIS>", "<orig>", "6 7", "</orig>", "<rect>", "0 0 5 6", "</rect>", "<eye>"]
    assert trailer[8] == "1.666667 1.750000"
    assert "2.500000 3.500000" in trailer
    assert trailer[-1] == "</features>"
    assert text.endswith("</features>\n")


def test_labels_survive_round_trip():
    mesh = stepped_mesh()
    mesh.set_label(2, 1, 4)
    restored = mesh_from_string(mesh_to_string(mesh))
    assert restored.get_label(2, 1) == 4
    assert restored.get_label(0, 0) == 0


def test_round_trip_within_half_step():
    rng = np.random.default_rng(7)
    xs = rng.uniform(-50, 500, size=(6, 5))
    ys = rng.uniform(-50, 500, size=(6, 5))
    mesh = MeshGrid.from_arrays(xs, ys)

    buf = io.StringIO()
    write_mesh(mesh, buf)
    buf.seek(0)
    restored = read_mesh(buf)

    rx, ry = restored.as_arrays()
    assert restored.shape == (5, 6)
    assert np.all(np.abs(rx - xs) <= 0.05 + 1e-9)
    assert np.all(np.abs(ry - ys) <= 0.05 + 1e-9)


def test_truncation_fails_before_last_required_line():
    lines = mesh_to_string(stepped_mesh()).splitlines(keepends=True)
    required = 2 + 5 * 4
    for cut in range(required):
        with pytest.raises(MeshTruncatedError):
            read_mesh(lines[:cut])


def test_truncation_reports_counts():
    lines = mesh_to_string(stepped_mesh()).splitlines(keepends=True)
    with pytest.raises(MeshTruncatedError) as excinfo:
        read_mesh(lines[:10])
    assert excinfo.value.expected == 20
    assert excinfo.value.found == 8


def test_trailer_is_optional():
    text = mesh_to_string(stepped_mesh())
    lines = text.splitlines(keepends=True)
    assert read_mesh(lines[:22]) == mesh_from_string(text)


def test_truncated_is_a_format_error():
    assert issubclass(MeshTruncatedError, MeshFormatError)


@pytest.mark.parametrize("text", [
    "M3\n4 4\n",
    "M2\n4\n",
    "M2\n4 x\n",
    "M2\n3 4\n",
    "M2\n4 4\n0 0\n",
    "M2\n4 4\n0 0 0 0\n",
    "M2\n4 4\n1.5 0 0\n",
])
def test_malformed_input(text):
    with pytest.raises(MeshFormatError) as excinfo:
        mesh_from_string(text)
    assert not isinstance(excinfo.value, MeshTruncatedError)


def test_save_and_load(tmp_path, bent_mesh):
    path = tmp_path / 'nested' / 'bent.mesh'
    save_mesh(bent_mesh, path)
    loaded = load_mesh(path)
    lx, ly = loaded.as_arrays()
    bx, by = bent_mesh.as_arrays()
    assert np.allclose(lx, bx, atol=0.05)
    assert np.allclose(ly, by, atol=0.05)


def test_load_missing_file(tmp_path):
    with pytest.raises(MeshLoadError):
        load_mesh(tmp_path / 'missing.mesh')


def test_load_non_ascii_content_is_format_error(tmp_path):
    path = tmp_path / 'accent.mesh'
    path.write_bytes("M2\n4 4\n0 0 0\ncafé\n".encode('utf-8'))
    with pytest.raises(MeshFormatError) as excinfo:
        load_mesh(path)
    assert not isinstance(excinfo.value, MeshLoadError)
