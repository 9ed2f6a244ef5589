"""Tests for password generation."""

import random
import string
from collections import Counter
from itertools import permutations

import pytest

from core import (
    CharacterSet,
    EntropyError,
    GenerationSpec,
    ValidationError,
    fisher_yates_shuffle,
    generate_password,
    seed_random,
    try_generate_password,
)
from core.config import SEED_BYTES


def count_from(password, alphabet):
    return sum(1 for c in password if c in alphabet)


class TestGenerationSpec:
    """Test spec construction and validation."""

    def test_default_spec(self):
        """Default is length 12 with one of each of four classes."""
        spec = GenerationSpec.default()
        assert spec.length == 12
        assert [cs.chars for cs in spec.character_sets] == [
            string.ascii_lowercase,
            string.ascii_uppercase,
            string.digits,
            string.punctuation,
        ]
        assert all(cs.min_count == 1 for cs in spec.character_sets)

    def test_from_lists_default_counts(self):
        """Omitted counts default to one per set."""
        spec = GenerationSpec.from_lists(10, ["ab", "12"])
        assert spec.character_sets == (CharacterSet("ab", 1), CharacterSet("12", 1))

    def test_mismatched_list_lengths(self):
        """Set and count lists must be the same length."""
        with pytest.raises(ValidationError):
            GenerationSpec.from_lists(10, ["abc", "123"], [1, 1, 1])

    def test_min_counts_exceed_length(self):
        """TotalLength=5 with MinCounts=[3,3] is rejected."""
        spec = GenerationSpec.from_lists(5, ["abc", "123"], [3, 3])
        with pytest.raises(ValidationError):
            spec.validate(min_length=1)

    def test_min_counts_exceed_length_at_default_bounds(self):
        spec = GenerationSpec.from_lists(8, ["abc", "123"], [5, 5])
        with pytest.raises(ValidationError):
            spec.validate()

    @pytest.mark.parametrize("length", [0, 7, 256, 1000])
    def test_length_out_of_bounds(self, length):
        """Length must lie in [8, 255] by default."""
        spec = GenerationSpec.from_lists(length, [string.ascii_letters], [0])
        with pytest.raises(ValidationError):
            spec.validate()

    @pytest.mark.parametrize("length", [8, 12, 255])
    def test_length_bounds_inclusive(self, length):
        GenerationSpec.from_lists(length, [string.ascii_letters]).validate()

    def test_bounds_are_configurable(self):
        spec = GenerationSpec.from_lists(4, ["ab"])
        spec.validate(min_length=4, max_length=4)

    def test_empty_alphabet(self):
        spec = GenerationSpec.from_lists(10, ["abc", ""])
        with pytest.raises(ValidationError):
            spec.validate()

    def test_negative_min_count(self):
        spec = GenerationSpec.from_lists(10, ["abc"], [-1])
        with pytest.raises(ValidationError):
            spec.validate()

    def test_no_character_sets(self):
        with pytest.raises(ValidationError):
            GenerationSpec(length=10).validate()


class TestGeneratePassword:
    """Test cases for secure password generation."""

    def test_default_password_length(self):
        """Default password should be 12 characters."""
        assert len(generate_password()) == 12

    def test_custom_length(self):
        """Password should match requested length."""
        for length in [8, 12, 20, 64, 255]:
            spec = GenerationSpec.from_lists(length, [string.ascii_letters, string.digits])
            assert len(generate_password(spec)) == length

    def test_minimum_counts_honored(self):
        """Every set contributes at least its minimum."""
        sets = ["abc", "XYZ", "789", "!?"]
        counts = [3, 2, 4, 1]
        spec = GenerationSpec.from_lists(16, sets, counts)
        for _ in range(200):
            password = generate_password(spec)
            for alphabet, minimum in zip(sets, counts):
                assert count_from(password, alphabet) >= minimum

    def test_default_spec_covers_all_classes(self):
        for _ in range(200):
            password = generate_password()
            assert count_from(password, string.ascii_lowercase) >= 1
            assert count_from(password, string.ascii_uppercase) >= 1
            assert count_from(password, string.digits) >= 1
            assert count_from(password, string.punctuation) >= 1

    def test_only_pool_characters(self):
        spec = GenerationSpec.from_lists(32, ["ab", "01"])
        assert set(generate_password(spec)) <= set("ab01")

    def test_minimums_filling_whole_length(self):
        """When minimums add up to the length, counts are exact."""
        spec = GenerationSpec.from_lists(8, ["abc", "123"], [4, 4])
        password = generate_password(spec)
        assert count_from(password, "abc") == 4
        assert count_from(password, "123") == 4

    def test_zero_minimum_set_still_in_pool(self):
        spec = GenerationSpec.from_lists(64, ["a", "b"], [0, 0])
        password = generate_password(spec)
        assert set(password) <= {"a", "b"}

    def test_randomness(self):
        """No repeats in 10,000 default passwords."""
        passwords = [generate_password() for _ in range(10_000)]
        assert len(set(passwords)) == 10_000

    def test_guaranteed_characters_not_in_fixed_positions(self):
        """Guaranteed characters are shuffled away from the leading positions."""
        spec = GenerationSpec.from_lists(8, [string.ascii_lowercase, string.digits], [4, 4])
        first_chars = {generate_password(spec)[0] in string.digits for _ in range(200)}
        assert first_chars == {True, False}

    def test_same_seed_same_password(self, fixed_entropy):
        """Generation is a pure function of the seed bytes."""
        assert generate_password(entropy_source=fixed_entropy) == \
            generate_password(entropy_source=fixed_entropy)

    def test_entropy_read_once(self):
        """One seed read of SEED_BYTES per invocation."""
        calls = []

        def source(n):
            calls.append(n)
            return bytes(n)

        generate_password(entropy_source=source)
        assert calls == [SEED_BYTES]

    def test_validation_consumes_no_entropy(self):
        calls = []

        def source(n):
            calls.append(n)
            return bytes(n)

        with pytest.raises(ValidationError):
            generate_password(GenerationSpec.from_lists(5, ["abc", "123"], [3, 3]), source)
        assert calls == []


class TestEntropy:
    """Test failures of the secure random source."""

    def test_source_raises(self):
        def broken(n):
            raise OSError("no randomness")

        with pytest.raises(EntropyError):
            generate_password(entropy_source=broken)

    def test_source_not_implemented(self):
        def missing(n):
            raise NotImplementedError

        with pytest.raises(EntropyError):
            seed_random(missing)

    def test_short_read(self):
        with pytest.raises(EntropyError):
            seed_random(lambda n: b"\x01\x02")


class TestGenerationResult:
    """Test the non-raising generation API."""

    def test_success(self):
        result = try_generate_password()
        assert result.ok
        assert len(result.password) == 12
        assert result.unwrap() == result.password

    def test_validation_error(self):
        result = try_generate_password(GenerationSpec.from_lists(5, ["abc", "123"], [3, 3]))
        assert not result.ok
        assert isinstance(result.error, ValidationError)
        assert result.password is None
        with pytest.raises(ValidationError):
            result.unwrap()

    def test_entropy_error(self):
        result = try_generate_password(entropy_source=lambda n: b"")
        assert isinstance(result.error, EntropyError)


class TestFisherYatesShuffle:
    """Test the shuffle on its own."""

    def test_keeps_multiset(self):
        buffer = list("aabbbcd")
        fisher_yates_shuffle(buffer, random.Random(7))
        assert Counter(buffer) == Counter("aabbbcd")

    def test_empty_and_single(self):
        empty = []
        single = ["x"]
        fisher_yates_shuffle(empty, random.Random(1))
        fisher_yates_shuffle(single, random.Random(1))
        assert empty == []
        assert single == ["x"]

    def test_uniform_permutations(self):
        """Chi-square test: all 24 orderings of 4 items are equally likely."""
        rng = random.Random(20240601)
        trials = 48_000
        counts = Counter()
        for _ in range(trials):
            buffer = list("abcd")
            fisher_yates_shuffle(buffer, rng)
            counts["".join(buffer)] += 1

        assert set(counts) == {"".join(p) for p in permutations("abcd")}

        expected = trials / 24
        chi_square = sum((observed - expected) ** 2 / expected for observed in counts.values())
        # 23 degrees of freedom; 61.1 is the p=1e-6 critical value
        assert chi_square < 61.1
