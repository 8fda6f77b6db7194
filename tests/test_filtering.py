"""Tests for hierarchy filtering and label search."""

from treestatelib.core import filter_tree, get_all_node_ids, label_matcher, search_tree
from treestatelib.testing import make_node


def shape(nodes):
    """Render a hierarchy as nested (id, children) tuples."""
    return [(node.id, shape(node.children)) for node in nodes]


class TestFilterTree:

    def test_keeps_matches_and_their_ancestors(self):
        roots = [make_node('a', make_node('b', make_node('d')), make_node('c'))]

        result = filter_tree(roots, lambda node: node.id == 'd')

        assert shape(result) == [('a', [('b', [('d', [])])])]

    def test_matched_node_keeps_only_matching_descendants(self, tree):
        result = search_tree(tree, 'c', 'name')
        assert shape(result) == [('a', [('c', [])])]

    def test_matched_root_with_matched_descendant(self, tree):
        result = filter_tree(tree, lambda node: node.id in ('a', 'e'))
        assert shape(result) == [('a', [('c', [('e', [])])])]

    def test_no_match_drops_everything(self, tree):
        assert filter_tree(tree, lambda node: False) == []

    def test_everything_matches(self, tree):
        result = filter_tree(tree, lambda node: True)
        assert get_all_node_ids(result) == get_all_node_ids(tree)

    def test_input_is_not_mutated(self, tree):
        search_tree(tree, 'd', 'name')
        assert get_all_node_ids(tree) == ['a', 'b', 'c', 'd', 'e']
        assert len(tree[0].children) == 2

    def test_copies_keep_attributes(self, file_tree):
        result = search_tree(file_tree, 'readme', 'name')
        readme = result[0].children[0].children[0]
        assert readme.id == 'readme'
        assert readme['type'] == 'document'


class TestLabelMatcher:

    def test_case_insensitive_substring(self):
        matcher = label_matcher('READ', 'name')
        assert matcher(make_node('r', name='README.md'))
        assert matcher(make_node('r', name='thread.txt'))
        assert not matcher(make_node('r', name='guide.pdf'))

    def test_non_string_labels_never_match(self):
        matcher = label_matcher('4', 'name')
        assert not matcher(make_node('n', name=42))
        assert not matcher(make_node('n', name=None))

    def test_other_label_property(self, file_tree):
        result = search_tree(file_tree, 'py', 'name')
        assert get_all_node_ids(result) == ['root', 'src', 'main', 'util']
        assert search_tree(file_tree, 'py', 'title') == []
