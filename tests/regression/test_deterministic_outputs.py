from pathlib import Path

import pytest

from crimeseries.cli import parse_args, run_command


def _run_once(workspace: dict, data_dir: Path, run_id: str) -> None:
    args = parse_args(
        [
            "all",
            "--config-dir",
            str(workspace["config_dir"]),
            "--data-dir",
            str(data_dir),
            "--run-id",
            run_id,
        ]
    )
    assert run_command(args) == 0


@pytest.mark.regression
def test_zonal_outputs_are_byte_stable_for_same_inputs(pipeline_workspace, tmp_path: Path):
    workspace = pipeline_workspace()
    raw_dir = workspace["data_dir"] / "raw"
    second = tmp_path / "second"
    (second / "raw").mkdir(parents=True)
    for sheet in raw_dir.glob("*.xlsx"):
        (second / "raw" / sheet.name).write_bytes(sheet.read_bytes())

    _run_once(workspace, workspace["data_dir"], "run-a")
    _run_once(workspace, second, "run-b")

    for relative in ("aggregated/hurto_personas_2020.csv", "categories/hurto_personas.csv", "bogota/hurto_personas.csv"):
        first_bytes = (workspace["data_dir"] / relative).read_bytes()
        second_bytes = (second / relative).read_bytes()
        assert first_bytes == second_bytes, relative


@pytest.mark.regression
def test_rerun_over_existing_outputs_is_stable(pipeline_workspace):
    workspace = pipeline_workspace()
    data_dir = workspace["data_dir"]

    _run_once(workspace, data_dir, "run-a")
    first = (data_dir / "bogota" / "hurto_personas.csv").read_bytes()
    _run_once(workspace, data_dir, "run-b")

    assert (data_dir / "bogota" / "hurto_personas.csv").read_bytes() == first
