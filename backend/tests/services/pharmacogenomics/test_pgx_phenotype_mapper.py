"""
Unit tests for phenotype mapping.
Tests diplotype parsing, activity scoring and phenotype inference.
"""

import pytest

from oncosafe.services.pharmacogenomics.models import PGxResult, Phenotype
from oncosafe.services.pharmacogenomics.phenotype_mapper import (
    GenotypeParseError,
    activity_score,
    map_phenotype,
    map_phenotypes,
    parse_diplotype,
)


class TestParseDiplotype:

    def test_simple(self):
        assert parse_diplotype("*4/*4") == [("*4", 1), ("*4", 1)]

    def test_copy_number(self):
        assert parse_diplotype("*1/*2x2") == [("*1", 1), ("*2", 2)]
        assert parse_diplotype("*1/*1xN") == [("*1", 1), ("*1", 2)]

    def test_whitespace_is_ignored(self):
        assert parse_diplotype(" *1 / *17 ") == [("*1", 1), ("*17", 1)]

    @pytest.mark.parametrize("genotype", ["*1", "*1/*2/*3", "/*2", ""])
    def test_malformed(self, genotype):
        with pytest.raises(GenotypeParseError):
            parse_diplotype(genotype)


class TestActivityScore:

    @pytest.mark.parametrize("gene,genotype,expected", [
        ("CYP2D6", "*1/*1", 2.0),
        ("CYP2D6", "*4/*4", 0.0),
        ("CYP2D6", "*1/*10", 1.25),
        ("CYP2D6", "*1/*2x2", 3.0),
        ("CYP2C19", "*1/*17", 2.5),
        ("cyp2c9", "*1/*3", 1.0),
        ("DPYD", "*1/HapB3", 1.5),
    ])
    def test_scores(self, gene, genotype, expected):
        score, reason = activity_score(gene, genotype)
        assert reason is None
        assert score == pytest.approx(expected)

    def test_unsupported_gene(self):
        score, reason = activity_score("HLA-B", "*57:01/*1")
        assert score is None
        assert "HLA-B" in reason

    def test_unknown_allele(self):
        score, reason = activity_score("CYP2D6", "*1/*999")
        assert score is None
        assert reason == "Unknown CYP2D6 allele *999"

    def test_copy_number_only_for_cyp2d6(self):
        score, reason = activity_score("CYP2C19", "*1/*17x2")
        assert score is None
        assert "Copy number" in reason


class TestMapPhenotype:

    @pytest.mark.parametrize("gene,genotype,phenotype", [
        ("CYP2D6", "*4/*4", Phenotype.POOR_METABOLIZER),
        ("CYP2D6", "*1/*4", Phenotype.INTERMEDIATE_METABOLIZER),
        ("CYP2D6", "*1/*10", Phenotype.NORMAL_METABOLIZER),
        ("CYP2D6", "*1/*1xN", Phenotype.ULTRARAPID_METABOLIZER),
        ("CYP2C19", "*2/*2", Phenotype.POOR_METABOLIZER),
        ("CYP2C19", "*1/*17", Phenotype.RAPID_METABOLIZER),
        ("CYP2C19", "*17/*17", Phenotype.ULTRARAPID_METABOLIZER),
        ("CYP2C9", "*3/*3", Phenotype.POOR_METABOLIZER),
        ("TPMT", "*1/*3A", Phenotype.INTERMEDIATE_METABOLIZER),
        ("DPYD", "*2A/*2A", Phenotype.POOR_METABOLIZER),
        ("UGT1A1", "*28/*28", Phenotype.POOR_METABOLIZER),
        ("SLCO1B1", "*5/*5", Phenotype.POOR_FUNCTION),
        ("SLCO1B1", "*1/*5", Phenotype.DECREASED_FUNCTION),
    ])
    def test_inference(self, gene, genotype, phenotype):
        mapped, gap = map_phenotype(PGxResult(gene=gene, genotype=genotype))

        assert gap is None
        assert mapped.phenotype == phenotype
        assert mapped.phenotype_inferred
        assert mapped.activity_score is not None

    def test_supplied_phenotype_is_kept(self):
        result = PGxResult(gene="CYP2D6", genotype="*1/*1", phenotype="PM")

        mapped, gap = map_phenotype(result)

        assert gap is None
        assert mapped.phenotype == Phenotype.POOR_METABOLIZER
        assert not mapped.phenotype_inferred
        assert mapped.activity_score is None

    def test_missing_genotype_is_a_gap(self):
        mapped, gap = map_phenotype(PGxResult(gene="CYP2D6"))
        assert mapped.phenotype is None
        assert gap.reason == "No genotype or phenotype reported"

    def test_unparseable_supplied_phenotype_is_inferred(self):
        mapped, gap = map_phenotype(PGxResult(gene="CYP2D6", genotype="*4/*4", phenotype="sluggish"))
        assert gap is None
        assert mapped.phenotype == Phenotype.POOR_METABOLIZER
        assert mapped.phenotype_inferred


class TestMapPhenotypes:

    def test_gaps_and_order(self):
        mapping = map_phenotypes([
            PGxResult(gene="CYP2D6", genotype="*4/*4"),
            PGxResult(gene="HLA-B", genotype="*57:01/*1"),
            PGxResult(gene="CYP2C19", phenotype="Normal Metabolizer"),
        ])

        assert mapping.genes_evaluated == ["CYP2D6", "HLA-B", "CYP2C19"]
        assert [g.gene for g in mapping.gaps] == ["HLA-B"]
        assert mapping.results[2].phenotype == Phenotype.NORMAL_METABOLIZER

    def test_inputs_are_not_mutated(self):
        original = PGxResult(gene="CYP2D6", genotype="*4/*4")
        map_phenotypes([original])
        assert original.phenotype is None


class TestPhenotypeParse:

    @pytest.mark.parametrize("label,expected", [
        ("PM", Phenotype.POOR_METABOLIZER),
        ("um", Phenotype.ULTRARAPID_METABOLIZER),
        ("EM", Phenotype.NORMAL_METABOLIZER),
        ("Poor Metabolizer", Phenotype.POOR_METABOLIZER),
        ("ultra-rapid metabolizer", Phenotype.ULTRARAPID_METABOLIZER),
        ("Extensive Metabolizer", Phenotype.NORMAL_METABOLIZER),
        ("decreased function", Phenotype.DECREASED_FUNCTION),
        ("", None),
        ("bogus", None),
    ])
    def test_parse(self, label, expected):
        assert Phenotype.parse(label) == expected
