import unittest
import pandas as pd
import numpy as np
import tempfile
import io
from contextlib import redirect_stdout
from pathlib import Path
from typer.testing import CliRunner
from parentase.pipeline import compute_parental_ase, run_parental_ase
from parentase.__main__ import app

RAW_COUNTS = (
    "Gene_Name,S1,S2\n"
    "GeneA_129,80,0\n"
    "GeneA_JF1,20,0\n"
    "GeneB_129,95,15\n"
    "GeneB_JF1,5,85\n"
    "GeneC_129,50,3\n"
)


class TestParentalASEPipeline(unittest.TestCase):
    """End-to-end tests from raw counts file to result table."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.input_file = Path(self.temp_dir.name) / "raw" / "rawcounts.csv"
        self.input_file.parent.mkdir()
        self.input_file.write_text(RAW_COUNTS)
        self.output_file = Path(self.temp_dir.name) / "processed" / "parentalASE.csv"

    def tearDown(self):
        self.temp_dir.cleanup()

    def _run(self, **kwargs):
        kwargs.setdefault("verbose", False)
        return run_parental_ase(self.input_file, self.output_file, **kwargs)

    def test_signed_policy(self):
        results = self._run().set_index("base_gene_name")

        self.assertListEqual(list(results.index), ["GeneA", "GeneB", "GeneC"])
        self.assertAlmostEqual(results.loc["GeneA", "S1_allelic_expression_ratio"], 0.6)
        self.assertEqual(results.loc["GeneA", "S1_imprinting_status"], "Not Imprinted")
        self.assertAlmostEqual(results.loc["GeneB", "S1_allelic_expression_ratio"], 0.9)
        self.assertEqual(results.loc["GeneB", "S1_imprinting_status"], "Paternally Imprinted")
        self.assertAlmostEqual(results.loc["GeneB", "S2_allelic_expression_ratio"], -0.7)
        self.assertEqual(results.loc["GeneB", "S2_imprinting_status"], "Maternally Imprinted")

    def test_percent_policy(self):
        results = self._run(policy="percent").set_index("base_gene_name")

        self.assertAlmostEqual(results.loc["GeneA", "S1_allelic_expression_ratio_percent"], 60.0)
        self.assertEqual(results.loc["GeneA", "S1_imprinting_status"], "Not Imprinted")
        self.assertAlmostEqual(results.loc["GeneB", "S1_allelic_expression_ratio_percent"], 90.0)
        self.assertEqual(results.loc["GeneB", "S1_imprinting_status"], "Imprinted")
        self.assertEqual(results.loc["GeneB", "S2_imprinting_status"], "Not Imprinted")

    def test_zero_total_not_determined(self):
        results = self._run().set_index("base_gene_name")
        self.assertTrue(np.isnan(results.loc["GeneA", "S2_allelic_expression_ratio"]))
        self.assertEqual(results.loc["GeneA", "S2_imprinting_status"], "Not Determined")

    def test_missing_pairing_not_determined(self):
        results = self._run().set_index("base_gene_name")
        for sample in ["S1", "S2"]:
            self.assertTrue(np.isnan(results.loc["GeneC", f"{sample}_allelic_expression_ratio"]))
            self.assertEqual(results.loc["GeneC", f"{sample}_imprinting_status"], "Not Determined")

    def test_column_coverage(self):
        results = self._run()
        ratio_cols = [c for c in results.columns if c.endswith("_allelic_expression_ratio")]
        status_cols = [c for c in results.columns if c.endswith("_imprinting_status")]
        self.assertListEqual(ratio_cols, ["S1_allelic_expression_ratio", "S2_allelic_expression_ratio"])
        self.assertListEqual(status_cols, ["S1_imprinting_status", "S2_imprinting_status"])
        self.assertEqual(len(results.columns), 5)

    def test_output_file_contents(self):
        self._run()
        lines = self.output_file.read_text().splitlines()
        self.assertEqual(
            lines[0],
            "base_gene_name,S1_allelic_expression_ratio,S2_allelic_expression_ratio,"
            "S1_imprinting_status,S2_imprinting_status"
        )
        self.assertEqual(lines[1], "GeneA,0.6,,Not Imprinted,Not Determined")
        self.assertEqual(lines[3], "GeneC,,,Not Determined,Not Determined")

    def test_duplicate_rows_ignored(self):
        self._run()
        expected = self.output_file.read_bytes()

        self.input_file.write_text(RAW_COUNTS + "GeneB_JF1,5,85\nGeneA_129,80,0\n")
        self._run()
        self.assertEqual(self.output_file.read_bytes(), expected)

    def test_idempotent_output(self):
        self._run(policy="percent")
        first = self.output_file.read_bytes()
        self._run(policy="percent")
        self.assertEqual(self.output_file.read_bytes(), first)

    def test_malformed_input_writes_nothing(self):
        self.input_file.write_text("Gene_Name,S1\nGeneA_129,eighty\n")
        with self.assertRaises(ValueError):
            self._run()
        self.assertFalse(self.output_file.exists())

    def test_unmatched_suffix_writes_nothing(self):
        self.input_file.write_text(RAW_COUNTS + "Xist,4,4\n")
        with self.assertRaises(ValueError):
            self._run()
        self.assertFalse(self.output_file.exists())

    def test_unmatched_suffix_drop(self):
        self.input_file.write_text(RAW_COUNTS + "Xist,4,4\n")
        results = self._run(unmatched="drop")
        self.assertListEqual(list(results["base_gene_name"]), ["GeneA", "GeneB", "GeneC"])

    def test_verbose_reports_path(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            run_parental_ase(self.input_file, self.output_file)
        self.assertIn(f"File saved to: {self.output_file}", buffer.getvalue())

    def test_header_only_keeps_sample_columns(self):
        self.input_file.write_text("Gene_Name,S1,S2\n")
        results = self._run()
        self.assertEqual(len(results), 0)
        self.assertEqual(
            self.output_file.read_text().splitlines(),
            [
                "base_gene_name,S1_allelic_expression_ratio,S2_allelic_expression_ratio,"
                "S1_imprinting_status,S2_imprinting_status"
            ]
        )

    def test_all_rows_dropped_keeps_sample_columns(self):
        self.input_file.write_text("Gene_Name,S1,S2\nXist,4,4\n")
        results = self._run(unmatched="drop", policy="percent")
        self.assertEqual(len(results), 0)
        self.assertIn("S2_allelic_expression_ratio_percent", results.columns)
        self.assertIn("S1_imprinting_status", results.columns)

    def test_na_count_propagates(self):
        self.input_file.write_text("Gene_Name,S1\nGeneA_129,NA\nGeneA_JF1,20\n")
        results = self._run()
        self.assertEqual(results.loc[0, "S1_imprinting_status"], "Not Determined")

    def test_compute_in_memory(self):
        counts = pd.DataFrame({
            "Gene_Name": ["GeneA_129", "GeneA_JF1"],
            "S1": pd.array([80, 20], dtype="Int64"),
        })
        results = compute_parental_ase(counts, verbose=False)
        self.assertEqual(results.loc[0, "S1_imprinting_status"], "Not Imprinted")


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.input_file = Path(self.temp_dir.name) / "rawcounts.csv"
        self.input_file.write_text(RAW_COUNTS)
        self.output_file = Path(self.temp_dir.name) / "parentalASE.csv"

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_success(self):
        result = self.runner.invoke(app, [str(self.input_file), str(self.output_file), "--policy", "percent"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("File saved to:", result.output)
        header = self.output_file.read_text().splitlines()[0]
        self.assertIn("S1_allelic_expression_ratio_percent", header)

    def test_missing_input_fails(self):
        result = self.runner.invoke(app, [str(Path(self.temp_dir.name) / "nope.csv"), str(self.output_file)])
        self.assertEqual(result.exit_code, 1)
        self.assertFalse(self.output_file.exists())

    def test_invalid_policy_fails(self):
        result = self.runner.invoke(app, [str(self.input_file), str(self.output_file), "--policy", "bayes", "-q"])
        self.assertEqual(result.exit_code, 1)
        self.assertFalse(self.output_file.exists())


if __name__ == "__main__":
    unittest.main()
