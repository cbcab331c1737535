"""Unit tests for FASTA, ClustalW and parameter file handling."""

from __future__ import annotations

import io

import pytest

from probmsa.types import MultiSequence, NucleotideSequence, ProteinSequence
from probmsa.utils import (
    default_parameters,
    load_parameters,
    read_fasta,
    save_parameters,
    write_clustal,
    write_fasta,
)
from probmsa.utils.clustal import conservation_symbol, format_clustal
from probmsa.utils.serialization import parameters_from_dict, parameters_to_dict


def _aligned(identifier: str, text: str, label: int) -> ProteinSequence:
    return ProteinSequence(
        identifier=identifier,
        residues=list(text),
        label=label,
        sort_label=label,
        aligned=True,
    )


def test_read_fasta_labels_follow_input_order(tmp_path):
    first = tmp_path / "a.fasta"
    second = tmp_path / "b.fasta"
    first.write_text(">one first protein\nMKT-AY\nIAK\n>two\nMKV\n", encoding="utf-8")
    second.write_text(">three\nmkt\n", encoding="utf-8")

    sequences = read_fasta([first, second])

    assert [s.identifier for s in sequences] == ["one", "two", "three"]
    assert sequences.labels == [0, 1, 2]
    assert sequences[0].sequence == "MKTAYIAK"
    assert sequences[0].description == "first protein"
    assert sequences[2].sequence == "MKT"
    assert not sequences[0].aligned


def test_read_fasta_aligned_keeps_gaps(tmp_path):
    path = tmp_path / "ref.fasta"
    path.write_text(">x\nAC-G\n>y\nA.TG\n", encoding="utf-8")
    alignment = read_fasta(path, kind="nucleotide", aligned=True)

    assert isinstance(alignment[0], NucleotideSequence)
    assert [s.sequence for s in alignment] == ["AC-G", "A-TG"]
    assert alignment.columns == 4


def test_read_fasta_rejects_empty_input():
    with pytest.raises(ValueError):
        read_fasta([])


def test_write_fasta_wraps_at_sixty_columns():
    alignment = MultiSequence([_aligned("long", "A" * 70, 0), _aligned("b", "C" * 70, 1)])
    handle = io.StringIO()
    write_fasta(alignment, handle)
    lines = handle.getvalue().splitlines()

    assert lines[0] == ">long"
    assert lines[1] == "A" * 60
    assert lines[2] == "A" * 10
    assert lines[3] == ">b"


def test_write_fasta_round_trip(tmp_path):
    alignment = MultiSequence([_aligned("x", "MK-T", 0), _aligned("y", "MKVT", 1)])
    path = tmp_path / "out.fasta"
    write_fasta(alignment, path)
    again = read_fasta(path, aligned=True)
    assert [s.sequence for s in again] == ["MK-T", "MKVT"]


@pytest.mark.parametrize(
    "column, symbol",
    [
        ("AAA", "*"),
        ("STA", ":"),
        ("CSA", "."),
        ("WPA", " "),
        ("A-A", " "),
    ],
)
def test_conservation_symbol(column, symbol):
    assert conservation_symbol(column) == symbol


def test_format_clustal_blocks():
    alignment = MultiSequence([_aligned("seq1", "MKT-A", 0), _aligned("s2", "MKTLA", 1)])
    text = format_clustal(alignment, width=3)
    lines = text.splitlines()

    assert lines[0].startswith("CLUSTAL W")
    assert lines[3] == "seq1    MKT"
    assert lines[4] == "s2      MKT"
    assert lines[5] == "        ***"
    assert lines[7] == "seq1    -A"
    assert lines[8] == "s2      LA"
    assert lines[9] == "         *"


def test_write_clustal_to_path(tmp_path):
    alignment = MultiSequence([_aligned("a", "MK", 0), _aligned("b", "MK", 1)])
    path = tmp_path / "out.aln"
    write_clustal(alignment, path)
    assert path.read_text(encoding="utf-8").startswith("CLUSTAL W")


def test_parameters_yaml_round_trip(tmp_path):
    params = default_parameters("nucleotide")
    path = tmp_path / "params.yaml"
    save_parameters(params, path)
    loaded = load_parameters(path)

    assert loaded.emissions.alphabet == params.emissions.alphabet
    assert loaded.transitions.init_distrib == pytest.approx(
        params.transitions.init_distrib
    )
    assert loaded.emissions.match["A"]["C"] == pytest.approx(
        params.emissions.match["A"]["C"]
    )


def test_parameters_from_dict_rejects_missing_sections():
    payload = parameters_to_dict(default_parameters("nucleotide"))
    del payload["transitions"]
    with pytest.raises(ValueError):
        parameters_from_dict(payload)


def test_load_parameters_rejects_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("parameters: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_parameters(path)
