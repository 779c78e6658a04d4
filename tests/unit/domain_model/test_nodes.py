from actions_lint.domain_model.nodes import Document, Node, NodeKind, line_starts, split_lines
from actions_lint.domain_model.primitives import Pos
from tests.conftest import parse_workflow_string


def scalar(value, tag="tag:yaml.org,2002:str"):
    return Node(NodeKind.SCALAR, value, Pos(0, 0), Pos(0, len(value)), tag=tag)


class TestNode:
    def test_is_expression(self):
        assert scalar("${{ matrix.os }}").is_expression()
        assert scalar("  ${{ matrix.os }} ").is_expression()
        assert not scalar("${{ a }}-${{ b }}").is_expression()
        assert not scalar("ubuntu-latest").is_expression()

    def test_scalar_type(self):
        assert scalar("1", "tag:yaml.org,2002:int").scalar_type == "int"
        assert scalar("", "tag:yaml.org,2002:null").is_null
        assert scalar("x", "!custom").scalar_type == "str"

    def test_mapping_access(self):
        document, _ = parse_workflow_string(
            """
            name: first
            on: push
            name: second
            """
        )
        root = document.root
        assert root.keys() == ["name", "on", "name"]
        assert root.get("name").text == "second"
        assert root.key_node("name").pos.line == 1
        assert "on" in root
        assert "jobs" not in root
        assert root.get("jobs") is None

    def test_walk_in_document_order(self):
        document, _ = parse_workflow_string("a: [b, c]\n")
        texts = [node.text for node in document.root.walk() if node.is_scalar]
        assert texts == ["a", "b", "c"]

    def test_collections_have_no_text(self):
        document, _ = parse_workflow_string("a: [b]\n")
        assert document.root.text == ""
        assert document.root.get("a").children()[0].parent is document.root.get("a")


class TestDocument:
    def test_pos_at(self):
        document = Document("w.yml", "ab\ncd\n", scalar("x"))
        assert document.pos_at(0) == Pos(0, 0, 0)
        assert document.pos_at(4) == Pos(1, 1, 4)
        assert document.pos_at(100) == Pos(2, 0, 6)

    def test_line_breaks_match_yaml_marks(self):
        assert line_starts("a\r\nb\rc\nd\x85e\u2028f\u2029g") == [0, 3, 5, 7, 9, 11, 13]
        assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]

    def test_pos_at_with_carriage_returns(self):
        document, _ = parse_workflow_string("on: push\rjobs:\r  build: {}\r")
        build = document.root.get("jobs").key_node("build")
        assert document.pos_at(build.pos.idx) == build.pos
