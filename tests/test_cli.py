import json

import pytest

from mixpallet_core.__main__ import main

JOB_YAML = """\
project:
  customerName: ACME
unitSystem: in
pallet:
  length: 48
  width: 40
  height: 5.9
  maxHeight: 52
  palletWeight: 45
units:
  - id: a
    name: Small
    externalL: 12
    externalW: 10
    externalH: 8
    quantity: 12
"""


@pytest.fixture
def job_file(tmp_path):
    path = tmp_path / "job.yaml"
    path.write_text(JOB_YAML, encoding="utf-8")
    return path


def test_cli_writes_outputs(job_file, tmp_path, capsys):
    csv_path = tmp_path / "report.csv"
    json_path = tmp_path / "result.json"
    code = main([str(job_file), "--csv", str(csv_path), "--json", str(json_path), "--check"])

    assert code == 0
    out = capsys.readouterr().out
    assert "Units placed:      12" in out
    assert "Valid" in out
    assert csv_path.read_text(encoding="utf-8").startswith("PALLET CONFIGURATION REPORT")
    assert json.loads(json_path.read_text(encoding="utf-8"))["totalUnits"] == 12


def test_cli_layered(job_file, capsys):
    assert main([str(job_file), "--layered"]) == 0
    assert "Units placed:      12" in capsys.readouterr().out


def test_cli_converts_units(job_file, tmp_path):
    json_path = tmp_path / "result.json"
    assert main([str(job_file), "--to-units", "mm", "--json", str(json_path)]) == 0
    data = json.loads(json_path.read_text(encoding="utf-8"))
    assert data["totalUnits"] == 12
    assert data["totalHeight"] > 1000


def test_cli_plot(job_file, tmp_path):
    import matplotlib

    matplotlib.use("Agg")
    plot_path = tmp_path / "pallet.png"
    assert main([str(job_file), "--plot", str(plot_path)]) == 0
    assert plot_path.exists()


def test_cli_missing_job(tmp_path, caplog):
    assert main([str(tmp_path / "missing.yaml")]) == 1
    assert "Cannot load job" in caplog.text


def test_cli_malformed_job(tmp_path):
    path = tmp_path / "job.yaml"
    path.write_text("units: []\n", encoding="utf-8")
    assert main([str(path)]) == 1
