"""
Tests for directive processing in Gnuplot scripts and their datafiles.
"""

from sqlplot_tools.processors.gnuplot import RULE, datafile_name, maybe_quote

PLOT_QUERY = "# PLOT SELECT x, y FROM points ORDER BY x\n"
MULTIPLOT_QUERY = "# MULTIPLOT(algo) SELECT algo, n AS x, time AS y FROM stats ORDER BY algo, x\n"


def _run(process, text, filename="speed.gp"):
    result = process(text, "gnuplot", filename)
    assert result.is_ok(), str(result)
    document = result.unwrap()
    return document.text.splitlines(), document.side_files


class TestHelpers:
    """Test datafile naming and value quoting."""

    def test_datafile_name(self):
        assert datafile_name("speed.gp") == "speed-data.txt"
        assert datafile_name("plots/speed.plot") == "plots/speed-data.txt"

    def test_maybe_quote(self):
        assert maybe_quote("1.5") == "1.5"
        assert maybe_quote("-3") == "-3"
        assert maybe_quote("fast algo") == "'fast algo'"
        assert maybe_quote("it's") == "'it''s'"


class TestPlot:
    """Test PLOT datasets."""

    def test_new_plot_command(self, process):
        lines, side_files = _run(process, PLOT_QUERY)

        assert lines == [
            "# PLOT SELECT x, y FROM points ORDER BY x",
            "plot \\",
            "    'speed-data.txt' index 0 with linespoints",
        ]
        assert side_files == {
            "speed-data.txt": f"{RULE}\n# PLOT SELECT x, y FROM points ORDER BY x\n#\n1\t2\n2\t3\n\n\n",
        }

    def test_idempotent(self, process):
        lines, data = _run(process, PLOT_QUERY)
        again, again_data = _run(process, "\n".join(lines) + "\n")

        assert again == lines
        assert again_data == data

    def test_existing_plot_line_is_kept(self, process):
        doc = PLOT_QUERY + "plot [0:10] \\\n    'speed-data.txt' index 3 title \"mine\" with lines lw 2\n"

        lines, _ = _run(process, doc)

        assert lines[1:] == [
            "plot [0:10] \\",
            "    'speed-data.txt' index 0 title \"mine\" with lines lw 2",
        ]

    def test_index_shared_between_directives(self, process):
        doc = PLOT_QUERY + "\n" + PLOT_QUERY
        lines, side_files = _run(process, doc)

        assert lines[2] == "    'speed-data.txt' index 0 with linespoints"
        assert lines[6] == "    'speed-data.txt' index 1 with linespoints"
        assert side_files["speed-data.txt"].count(RULE) == 2

    def test_datafile_next_to_script(self, process):
        lines, side_files = _run(process, PLOT_QUERY, "plots/speed.gp")

        assert list(side_files) == ["plots/speed-data.txt"]
        assert lines[2] == "    'speed-data.txt' index 0 with linespoints"


class TestMultiplot:
    """Test MULTIPLOT datasets."""

    EXPECTED = [
        "plot \\",
        "    'speed-data.txt' index 0 title \"algo=merge\" with linespoints, \\",
        "    'speed-data.txt' index 1 title \"algo=quick\" with linespoints",
    ]

    def test_plot_lines_and_datafile(self, process):
        lines, side_files = _run(process, MULTIPLOT_QUERY)

        assert lines[1:] == self.EXPECTED
        assert side_files["speed-data.txt"] == (
            f"{RULE}\n"
            "# MULTIPLOT(algo) SELECT algo, n AS x, time AS y FROM stats ORDER BY algo, x\n"
            "#\n"
            "# index 0 algo=merge\n"
            "1\t0.5\n"
            "2\t1.5\n"
            "\n\n"
            "# index 1 algo=quick\n"
            "1\t0.25\n"
            "2\t0.75\n"
            "\n\n"
        )

    def test_idempotent(self, process):
        lines, _ = _run(process, MULTIPLOT_QUERY)
        again, _ = _run(process, "\n".join(lines) + "\n")

        assert again == lines

    def test_decoration_kept_and_surplus_removed(self, db, process):
        doc = MULTIPLOT_QUERY + (
            "plot \\\n"
            "    'speed-data.txt' index 0 title \"old\" with lines lc 1, \\\n"
            "    'speed-data.txt' index 1 title \"gone\" with lines lc 2\n"
            "pause -1\n")
        db.execute("DELETE FROM stats WHERE algo = 'quick'")

        lines, _ = _run(process, doc)

        assert lines[1:] == [
            "plot \\",
            "    'speed-data.txt' index 0 title \"algo=merge\" with lines lc 1",
            "pause -1",
        ]

    def test_missing_datasets_appended(self, process):
        doc = MULTIPLOT_QUERY + "plot \\\n    'speed-data.txt' index 0 title \"x\" with dots\n"

        lines, _ = _run(process, doc)

        assert lines[1:] == [
            "plot \\",
            "    'speed-data.txt' index 0 title \"algo=merge\" with dots, \\",
            "    'speed-data.txt' index 1 title \"algo=quick\" with linespoints",
        ]

    def test_multiplot_after_plot_continues_index(self, process):
        lines, side_files = _run(process, PLOT_QUERY + MULTIPLOT_QUERY)

        assert "index 1 title \"algo=merge\"" in lines[5]
        assert "index 2 title \"algo=quick\"" in lines[6]
        assert "# index 2 algo=quick\n" in side_files["speed-data.txt"]


class TestMacro:
    """Test gnuplot variable definitions."""

    def test_macro_assignments(self, process):
        doc = "# MACRO SELECT COUNT(*) AS runs, 'fast algo' AS label FROM stats\nruns = 1\nplot x\n"

        lines, _ = _run(process, doc)

        assert lines[1:] == ["runs = 4", "label = 'fast algo'", "plot x"]

    def test_texttable_uses_hash_markers(self, process):
        lines, _ = _run(process, "# TEXTTABLE SELECT x FROM points\n")

        assert lines[-1] == "# END TEXTTABLE SELECT x FROM points"
