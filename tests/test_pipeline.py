"""End-to-end tests for the alignment pipeline and the command line."""

from __future__ import annotations

import numpy as np
import pytest

from probmsa.algorithms.model_selection import DivergenceLevel
from probmsa.algorithms.msa import MultipleAligner
from probmsa.cli import build_parser, config_from_args, main
from probmsa.config import AlignmentConfig
from probmsa.types import MultiSequence, ProteinSequence


def _family(texts) -> MultiSequence:
    return MultiSequence(
        [
            ProteinSequence(
                identifier=f"seq{index}",
                residues=list(text),
                label=index,
                sort_label=index,
            )
            for index, text in enumerate(texts)
        ]
    )


FAMILY = [
    "MKTAYIAKQRQISFVKSHFSRQ",
    "MKTAYIAKQRISFVKSHFSRQ",
    "MKSAYIAKQRQISFVKSHFSR",
    "MKTAYLAKQRQISFVKAHFSRQ",
]


def test_identical_sequences_align_without_gaps():
    result = MultipleAligner(AlignmentConfig(random_seed=0)).align(
        _family(["AAAA", "AAAA", "AAAA"])
    )

    assert result.selection.level == DivergenceLevel.HIGHLY_SIMILAR
    assert [s.sequence for s in result.alignment] == ["AAAA"] * 3
    assert result.alignment.gap_columns() == []


def test_pipeline_preserves_residues_and_input_order():
    sequences = _family(FAMILY)
    result = MultipleAligner(AlignmentConfig(random_seed=1, num_threads=2)).align(
        sequences
    )
    alignment = result.alignment

    assert alignment.labels == [0, 1, 2, 3]
    assert len({len(s) for s in alignment}) == 1
    for original, aligned in zip(sequences, alignment):
        assert aligned.ungapped().sequence == original.sequence
    assert result.distances.shape == (4, 4)
    assert len(result.matrices) == 6


@pytest.mark.parametrize(
    "overrides",
    [
        {"weighted_consistency": True},
        {"refinement_strategy": "tree"},
        {"consistency_reps": 0, "iterative_refinement_reps": 0},
        {"cutoff": 0.1},
    ],
)
def test_pipeline_variants_produce_valid_alignments(overrides):
    sequences = _family(FAMILY)
    config = AlignmentConfig(random_seed=2, **overrides)
    alignment = MultipleAligner(config).align(sequences).alignment

    assert alignment.labels == [0, 1, 2, 3]
    assert len({len(s) for s in alignment}) == 1
    for original, aligned in zip(sequences, alignment):
        assert aligned.ungapped().sequence == original.sequence


def test_alignment_order_follows_guide_tree():
    config = AlignmentConfig(random_seed=3, alignment_order=True)
    result = MultipleAligner(config).align(_family(FAMILY))
    assert result.alignment.labels == result.tree.root.leaves()


def test_seeded_runs_are_reproducible():
    config = AlignmentConfig(random_seed=4)
    first = MultipleAligner(config).align(_family(FAMILY)).alignment
    second = MultipleAligner(config).align(_family(FAMILY)).alignment
    assert [s.sequence for s in first] == [s.sequence for s in second]


def test_annotation_written(tmp_path):
    path = tmp_path / "scores.annot"
    config = AlignmentConfig(random_seed=5, annotation_path=str(path))
    result = MultipleAligner(config).align(_family(FAMILY))

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == result.alignment.columns
    assert all(len(line) == 4 for line in lines)
    assert all(0 <= int(line) <= 200 for line in lines)
    assert result.annotation == [int(line) for line in lines]


def test_single_sequence_passes_through(tmp_path):
    path = tmp_path / "single.annot"
    config = AlignmentConfig(annotation_path=str(path))
    result = MultipleAligner(config).align(_family(["MKT"]))

    assert [s.sequence for s in result.alignment] == ["MKT"]
    assert result.selection is None
    assert path.read_text(encoding="utf-8") == "   0\n   0\n   0\n"


def test_rejects_bad_labels():
    sequences = MultiSequence(
        [ProteinSequence(identifier="x", residues=list("MK"), label=5, sort_label=5)]
    )
    with pytest.raises(ValueError):
        MultipleAligner().align(sequences)
    with pytest.raises(ValueError):
        MultipleAligner().align(MultiSequence([]))


def test_cli_arguments_map_to_config():
    args = build_parser().parse_args(
        ["in.fa", "-c", "3", "-ir", "7", "-co", "0.2", "-clustalw", "-a",
         "--nucleotide", "--tree-refinement", "--seed", "9"]
    )
    config = config_from_args(args)

    assert config.consistency_reps == 3
    assert config.iterative_refinement_reps == 7
    assert config.cutoff == 0.2
    assert config.output_format == "clustalw"
    assert config.alignment_order
    assert config.sequence_type == "nucleotide"
    assert config.refinement_strategy == "tree"
    assert config.random_seed == 9


def test_cli_writes_fasta_and_parameters(tmp_path):
    fasta = tmp_path / "family.fasta"
    fasta.write_text(
        "".join(f">seq{i}\n{text}\n" for i, text in enumerate(FAMILY)), encoding="utf-8"
    )
    outfile = tmp_path / "aligned.fasta"
    params = tmp_path / "params.yaml"

    status = main(
        [str(fasta), "-o", str(outfile), "--seed", "0", "--write-params", str(params)]
    )

    assert status == 0
    text = outfile.read_text(encoding="utf-8")
    assert text.count(">") == 4
    assert params.read_text(encoding="utf-8").startswith("parameters:")


def test_cli_reports_invalid_arguments(tmp_path, caplog):
    fasta = tmp_path / "family.fasta"
    fasta.write_text(">a\nMKT\n>b\nMKV\n", encoding="utf-8")
    assert main([str(fasta), "-c", "9"]) == 1
    assert "consistency reps" in caplog.text


def test_cli_missing_input_file(tmp_path):
    assert main([str(tmp_path / "missing.fasta")]) == 1


def test_distances_are_symmetric():
    result = MultipleAligner(AlignmentConfig(random_seed=6)).align(_family(FAMILY))
    np.testing.assert_allclose(result.distances, result.distances.T)
