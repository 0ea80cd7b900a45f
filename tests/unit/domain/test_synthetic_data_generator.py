"""Tests for synthetic data generator service."""


import pytest
from domain.services import SyntheticDataGenerator


class TestSyntheticDataGenerator:
    """Tests for SyntheticDataGenerator service."""

    def test_generate_creates_requested_number_of_samples(self) -> None:
        """Test that generator creates the correct number of samples."""
        generator = SyntheticDataGenerator(seed=42)
        data = generator.generate(num_samples=50)
        assert data.size == 50

    def test_generate_uses_requested_feature_count(self) -> None:
        """Test that every data point has the requested number of features."""
        generator = SyntheticDataGenerator(seed=42)
        data = generator.generate(num_samples=20, n_features=5)
        assert data.n_features == 5
        assert all(len(dp.features) == 5 for dp in data.data_points)

    def test_generate_with_seed_is_reproducible(self) -> None:
        """Test that generator with same seed produces same results."""
        data1 = SyntheticDataGenerator(seed=42).generate(num_samples=10)
        data2 = SyntheticDataGenerator(seed=42).generate(num_samples=10)

        assert data1.data_points == data2.data_points

    def test_features_stay_within_range(self) -> None:
        """Test that generated features stay inside the configured range."""
        generator = SyntheticDataGenerator(seed=7)
        data = generator.generate(num_samples=100, n_features=4)

        limit = SyntheticDataGenerator.FEATURE_RANGE
        for dp in data.data_points:
            assert all(-limit <= x <= limit for x in dp.features)

    def test_classification_labels_are_binary(self) -> None:
        """Test that classification labels are 0 or 1 and both occur."""
        generator = SyntheticDataGenerator(seed=42)
        data = generator.generate(num_samples=200, task="classification")

        labels = {dp.label for dp in data.data_points}
        assert labels == {0.0, 1.0}

    def test_generate_with_zero_samples_raises_error(self) -> None:
        """Test that generating zero samples raises ValueError."""
        generator = SyntheticDataGenerator()
        with pytest.raises(ValueError, match="at least 1"):
            generator.generate(num_samples=0)

    def test_generate_with_zero_features_raises_error(self) -> None:
        """Test that generating zero features raises ValueError."""
        generator = SyntheticDataGenerator()
        with pytest.raises(ValueError, match="n_features must be at least 1"):
            generator.generate(num_samples=10, n_features=0)

    def test_generate_with_unknown_task_raises_error(self) -> None:
        """Test that an unknown task is rejected."""
        generator = SyntheticDataGenerator()
        with pytest.raises(ValueError, match="Unknown task"):
            generator.generate(num_samples=10, task="clustering")

    @pytest.mark.parametrize("seed", range(50))
    def test_small_classification_sets_have_two_points_per_class(
        self, seed: int
    ) -> None:
        """Test that 10 samples always give the trainer two examples per class."""
        data = SyntheticDataGenerator(seed=seed).generate(
            num_samples=10, task="classification"
        )

        labels = [dp.label for dp in data.data_points]
        assert labels.count(0.0) == 5
        assert labels.count(1.0) == 5
