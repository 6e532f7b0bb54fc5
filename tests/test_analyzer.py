import pandas as pd
import pytest

from hmp.analyzer import PlotConfig, PossibilityAnalyzer
from hmp.cli import main
from hmp.io import save_model_set, write_possibilities


def test_plot_config_requires_class_columns():
    with pytest.raises(ValueError):
        PlotConfig().ensure_columns([])


def test_plot_possibilities(tmp_path):
    pytest.importorskip("matplotlib")
    df = pd.DataFrame({"Walk": [0.0, 0.0, 0.4, 0.8], "Sit": [0.0, 0.0, 0.1, 0.0]})
    output = PossibilityAnalyzer().plot(df, tmp_path / "possibilities.png")
    assert output.exists()
    assert output.stat().st_size > 0


def test_plot_all_zero_table(tmp_path):
    pytest.importorskip("matplotlib")
    df = pd.DataFrame({"Walk": [0.0, 0.0]})
    output = PossibilityAnalyzer(PlotConfig(tight_layout=False)).plot(df, tmp_path / "zeros.png")
    assert output.exists()


def test_plot_model(tmp_path, small_model_set):
    pytest.importorskip("matplotlib")
    output = PossibilityAnalyzer().plot_model(small_model_set["still"], tmp_path / "still.png")
    assert output.exists()


def test_cli_plot_commands(tmp_path, small_model_set):
    pytest.importorskip("matplotlib")
    table = tmp_path / "RES_a.tsv"
    write_possibilities(pd.DataFrame({"still": [0.0, 0.5], "tilted": [0.0, 0.1]}), table)
    main(["plot", str(table), str(tmp_path / "a.png")])
    assert (tmp_path / "a.png").exists()

    models = save_model_set(small_model_set, tmp_path / "models.npz")
    main(["plot-model", str(models), "tilted", str(tmp_path / "tilted.png")])
    assert (tmp_path / "tilted.png").exists()
