import pytest
from lora.utils.similarity import cosine_similarity, most_similar

class TestCosineSimilarity:
    """Tests for cosine_similarity function."""
    
    def test_identical_vectors(self):
        vec = [1.0, 2.0, 3.0]
        assert cosine_similarity(vec, vec) == pytest.approx(1.0)
    
    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]) == pytest.approx(0.0)
    
    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [-1.0, -2.0, -3.0]) == pytest.approx(-1.0)
    
    def test_boundary_vectors_are_exact(self):
        query = [1.0, 0.0, 0.0, 0.0, 0.0]
        assert cosine_similarity(query, [93.0, 35.0, 11.0, 2.0, 1.0]) >= 0.93
        assert cosine_similarity(query, [92.0, 32.0, 16.0, 16.0, 0.0]) < 0.93

    @pytest.mark.parametrize("vec1,vec2", [
        ([], []),
        (None, [1.0]),
        ([1.0, 2.0], [1.0, 2.0, 3.0]),
        ([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]),
    ])
    def test_degenerate_inputs_score_zero(self, vec1, vec2):
        assert cosine_similarity(vec1, vec2) == 0.0


class TestMostSimilar:
    def test_picks_highest_similarity(self):
        item, score = most_similar([1.0, 0.0], [([0.0, 1.0], "b"), ([1.0, 0.1], "a")])
        assert item == "a"
        assert score > 0.99

    def test_ties_keep_first(self):
        item, _ = most_similar([1.0, 0.0], [([2.0, 0.0], "first"), ([3.0, 0.0], "second")])
        assert item == "first"

    def test_no_candidates(self):
        assert most_similar([1.0], []) == (None, 0.0)
