"""Synthetic data generator for demos and smoke tests.

Generates labelled tabular data so a model can be trained and served
without any external dataset.
"""

import random
import statistics
from typing import Sequence

from domain.value_objects import SUPPORTED_TASKS, TrainingData, TrainingDataPoint


class SyntheticDataGenerator:
    """Generator for synthetic labelled training data.

    Each generated dataset has a hidden linear relationship:

    - features are drawn uniformly from ``[-FEATURE_RANGE, FEATURE_RANGE]``
    - regression labels are ``w · x + bias`` plus Gaussian noise
    - classification labels are 1 when that score is above the median
      score of the dataset, 0 otherwise, so both classes are equally sized
    """

    FEATURE_RANGE = 5.0
    NOISE_STDDEV = 0.5

    def __init__(self, seed: int | None = None) -> None:
        """Initialize the synthetic data generator.

        Args:
            seed: Random seed for reproducibility
        """
        self._random = random.Random(seed)

    def generate(
        self,
        num_samples: int = 100,
        n_features: int = 3,
        task: str = "regression",
    ) -> TrainingData:
        """Generate synthetic training data.

        Args:
            num_samples: Number of data points to generate
            n_features: Number of features per data point
            task: "regression" or "classification"

        Returns:
            TrainingData with generated samples
        """
        if num_samples < 1:
            raise ValueError("num_samples must be at least 1")
        if n_features < 1:
            raise ValueError("n_features must be at least 1")
        if task not in SUPPORTED_TASKS:
            raise ValueError(f"Unknown task: {task}")

        weights = [self._random.uniform(-2.0, 2.0) for _ in range(n_features)]
        bias = self._random.uniform(-1.0, 1.0)

        rows = [self._generate_features(n_features) for _ in range(num_samples)]
        scores = [self._score(weights, bias, row) for row in rows]

        if task == "classification":
            threshold = statistics.median(scores)
            labels = [1.0 if score > threshold else 0.0 for score in scores]
        else:
            labels = [
                round(score + self._random.gauss(0, self.NOISE_STDDEV), 3)
                for score in scores
            ]

        return TrainingData.from_sequence(
            [
                TrainingDataPoint(features=row, label=label)
                for row, label in zip(rows, labels)
            ]
        )

    def _generate_features(self, n_features: int) -> tuple[float, ...]:
        return tuple(
            round(self._random.uniform(-self.FEATURE_RANGE, self.FEATURE_RANGE), 3)
            for _ in range(n_features)
        )

    @staticmethod
    def _score(
        weights: Sequence[float], bias: float, features: Sequence[float]
    ) -> float:
        """Hidden linear model behind every label."""
        return sum(w * x for w, x in zip(weights, features)) + bias
