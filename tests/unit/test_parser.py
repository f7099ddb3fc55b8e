"""Tests for the DarTwin DSL parser."""

from pathlib import Path

import pytest

from dartwin.core import ir
from dartwin.core.dsl_parser_impl import (
    normalize_doc,
    parse_dartwin,
    parse_dartwin_with_diagnostics,
)
from dartwin.core.errors import ParseError, make_parse_error
from dartwin.core.parser import parse_file


def codes(diagnostics: list[ir.Diagnostic]) -> list[ir.DiagnosticCode]:
    return [d.code for d in diagnostics]


class TestStrawberryDocument:
    """Tests against the Strawberry cultivation document."""

    def test_root_name(self, strawberry_model):
        assert strawberry_model.name == "StrawberryCultivationTrans"
        assert strawberry_model.type == "DarTwin"

    def test_system_contents(self, strawberry_model):
        """Test twins and ports keep declaration order."""
        assert len(strawberry_model.systems) == 1
        system = strawberry_model.systems[0]

        assert system.name == "Strawberry"
        assert [dt.name for dt in system.digital_twins] == ["StrawberryDT"]
        assert system.digital_twins[0].ports == [
            "multisensor_input",
            "actuator_output_irrigation",
            "actuator_output_human",
            "actuator_output_ventilation",
        ]
        assert [part.name for part in system.original_twins] == ["Cultivation"]
        assert system.original_twins[0].ports == [
            "MultiSensor",
            "IrrigationActuator",
            "HumanActuator",
            "VentilationActuator",
        ]

    def test_connections_as_written(self, strawberry_model):
        """Test connection ends are kept exactly as written."""
        connections = strawberry_model.systems[0].connections

        assert len(connections) == 4
        assert connections[0].from_ == "Strawberry.Cultivation.MultiSensor"
        assert connections[0].to == "StrawberryDT.multisensor_input"
        assert connections[1].from_ == "StrawberryDT.actuator_output_irrigation"
        assert connections[1].to == "Strawberry.Cultivation.IrrigationActuator"
        assert all(c.name is None for c in connections)

    def test_goals_with_normalized_doc(self, strawberry_model):
        assert strawberry_model.goals == [
            ir.Goal(name="increase_yield", doc="yield y higher y than before"),
            ir.Goal(name="apply_decreased_water", doc="water consumption w lower w than before"),
        ]

    def test_allocations(self, strawberry_model):
        assert strawberry_model.allocations == [
            ir.Allocation(goal="increase_yield", target="Strawberry.StrawberryDT"),
            ir.Allocation(goal="apply_decreased_water", target="Strawberry.StrawberryDT"),
        ]

    def test_no_dartrans_and_no_diagnostics(self, strawberry_text):
        model, diagnostics = parse_dartwin_with_diagnostics(strawberry_text)

        assert model.dartrans is None
        assert diagnostics == []


class TestConnectionNames:
    """Tests for inline and trailing-comment connection names."""

    def parse_connections(self, body: str) -> list[ir.Connection]:
        model = parse_dartwin(f"#dartwin X {{\n  #twinsystem S {{\n{body}\n  }}\n}}")
        return model.systems[0].connections

    def test_trailing_comment_name(self):
        """Test a `// name:` comment after the semicolon names the connection."""
        connections = self.parse_connections("connect A.p to B.q; // name: feed")

        assert connections[0].name == "feed"

    def test_trailing_comment_is_case_insensitive(self):
        connections = self.parse_connections("connect A.p to B.q; //NAME : feed-1")

        assert connections[0].name == "feed-1"

    def test_inline_name_wins(self):
        """Test an inline name takes precedence over the comment."""
        connections = self.parse_connections("connect A.p to B.q name inline; // name: other")

        assert connections[0].name == "inline"

    def test_plain_comment_is_not_a_name(self):
        connections = self.parse_connections("connect A.p to B.q; // wired last week")

        assert connections[0].name is None

    def test_comment_belongs_to_last_statement_on_line(self):
        """Test only the statement directly before the comment takes its name."""
        connections = self.parse_connections("connect A.p to B.q; connect C.r to D.s; // name: w")

        assert [c.name for c in connections] == [None, "w"]

    def test_comment_on_next_line_is_ignored(self):
        connections = self.parse_connections("connect A.p to B.q;\n// name: w")

        assert connections[0].name is None


class TestGoals:
    """Tests for goal declarations."""

    def test_bare_goal(self):
        """Test goals without a body, with and without a semicolon."""
        model = parse_dartwin("#dartwin X { #goal first; #goal second }")

        assert model.goals == [ir.Goal(name="first"), ir.Goal(name="second")]

    def test_first_doc_wins(self):
        model = parse_dartwin("#dartwin X { #goal g { doc /* one */ doc /* two */ } }")

        assert model.goals[0].doc == "one"

    def test_multiline_doc_is_normalized(self):
        model = parse_dartwin("#dartwin X {\n  #goal g {\n    doc /*\n      keep\n\n      dry\n    */\n  }\n}")

        assert model.goals[0].doc == "keep dry"

    def test_blank_doc_is_absent(self):
        model = parse_dartwin("#dartwin X { #goal g { doc /*   */ } }")

        assert model.goals[0].doc is None

    def test_normalize_doc(self):
        assert normalize_doc("  a\n\n   b  ") == "a b"
        assert normalize_doc("\n\n") is None


class TestDocumentStructure:
    """Tests for root discovery and nesting."""

    def test_missing_root(self):
        """Test text without a root header yields an empty model."""
        model, diagnostics = parse_dartwin_with_diagnostics("#twinsystem S { }")

        assert model == ir.DarTwinModel()
        assert model.is_empty
        assert codes(diagnostics) == [ir.DiagnosticCode.MISSING_ROOT]
        assert diagnostics[0].severity == ir.DiagnosticSeverity.INFO

    def test_text_before_root_is_ignored(self):
        model = parse_dartwin("notes here } #dartwin Farm { #goal g; }")

        assert model.name == "Farm"
        assert [g.name for g in model.goals] == ["g"]

    def test_incomplete_header_is_skipped(self):
        """Test the first complete `#dartwin <name> {` header is used."""
        model = parse_dartwin("#dartwin { }\n#dartwin Real { #goal g; }")

        assert model.name == "Real"

    def test_case_insensitive_keywords(self):
        model = parse_dartwin("#DARTWIN X { #TwinSystem S { PART P { Port p; } } }")

        assert model.systems[0].original_twins[0].ports == ["p"]

    def test_keyword_as_port_name(self):
        """Test a statement keyword may be used as a name."""
        model = parse_dartwin("#dartwin X { #twinsystem S { #digitaltwin D { port doc; port to; } } }")

        assert model.systems[0].digital_twins[0].ports == ["doc", "to"]

    def test_duplicate_ports_are_kept(self):
        model = parse_dartwin("#dartwin X { #twinsystem S { part P { port p; port p; } } }")

        assert model.systems[0].original_twins[0].ports == ["p", "p"]

    def test_only_direct_children_are_collected(self):
        """Test declarations inside an unrecognised block are not collected."""
        model = parse_dartwin("#dartwin X { extra { #goal hidden; } #goal shown; }")

        assert [g.name for g in model.goals] == ["shown"]

    def test_content_after_root_is_ignored(self):
        model = parse_dartwin("#dartwin X { } #goal outside;")

        assert model.goals == []


class TestRecovery:
    """Tests for error recovery and diagnostics."""

    def test_bad_statement_is_skipped(self):
        """Test a malformed connection does not hide the next one."""
        model, diagnostics = parse_dartwin_with_diagnostics(
            "#dartwin X {\n  #twinsystem S {\n    connect a.b;\n    connect c.d to e.f;\n  }\n}"
        )

        assert [c.from_ for c in model.systems[0].connections] == ["c.d"]
        assert codes(diagnostics) == [ir.DiagnosticCode.SYNTAX]
        assert (diagnostics[0].line, diagnostics[0].column) == (3, 16)
        assert diagnostics[0].message == "Expected 'to', got ';'"

    def test_missing_semicolon_resyncs_on_next_statement(self):
        model, diagnostics = parse_dartwin_with_diagnostics(
            "#dartwin X { #twinsystem S { #digitaltwin D { port p port q; } } }"
        )

        assert model.systems[0].digital_twins[0].ports == ["q"]
        assert codes(diagnostics) == [ir.DiagnosticCode.SYNTAX]

    def test_unterminated_blocks_keep_partial_content(self):
        """Test an unclosed document keeps everything parsed so far."""
        model, diagnostics = parse_dartwin_with_diagnostics(
            "#dartwin X {\n  #twinsystem S {\n    #digitaltwin D { port p;"
        )

        assert model.systems[0].digital_twins[0].ports == ["p"]
        assert codes(diagnostics) == [ir.DiagnosticCode.UNTERMINATED_BLOCK] * 3

    def test_unknown_statements_are_skipped(self):
        model, diagnostics = parse_dartwin_with_diagnostics(
            "#dartwin X { @@ #widget W { port p; } #goal g; }"
        )

        assert [g.name for g in model.goals] == ["g"]
        assert model.systems == []
        assert diagnostics == []

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "}}}}",
            "#dartwin",
            "#dartwin X {",
            "#dartwin X { connect",
            "#dartwin X { allocate to ; }",
            "#dartwin X { #goal g { doc /* open",
            "#dartwin X { #dartrans { #before {",
            "#dartwin X { #twinsystem { part { port ; } } }",
        ],
    )
    def test_never_raises(self, text):
        """Test incomplete editor content always yields a model."""
        model = parse_dartwin(text)

        assert isinstance(model, ir.DarTwinModel)


class TestDarTrans:
    """Tests for the transformation section."""

    def test_slices(self):
        """Test each sub-section keeps only the lists it declares."""
        model = parse_dartwin(
            """#dartwin T {
              #dartrans {
                #before { #goal a; }
                #after {
                  #twinsystem S { #digitaltwin D { port p; } }
                  allocate a to S.D;
                }
              }
            }"""
        )

        dartrans = model.dartrans
        assert dartrans is not None
        assert dartrans.before == ir.DarTwinSlice(goals=[ir.Goal(name="a")])
        assert dartrans.core is None
        assert [s.name for s in dartrans.after.systems] == ["S"]
        assert dartrans.after.goals is None
        assert dartrans.after.allocations == [ir.Allocation(goal="a", target="S.D")]
        assert [label for label, _ in dartrans.sections()] == ["before", "after"]

    def test_slices_are_not_root_declarations(self):
        model = parse_dartwin("#dartwin T { #dartrans { #core { #goal a; } } }")

        assert model.goals == []
        assert model.dartrans.core.goals == [ir.Goal(name="a")]

    def test_empty_section_is_absent(self):
        model = parse_dartwin("#dartwin T { #dartrans { } }")

        assert model.dartrans is None

    def test_repeated_subsection_first_wins(self):
        model, diagnostics = parse_dartwin_with_diagnostics(
            "#dartwin T { #dartrans { #before { #goal a; } #before { #goal b; } } }"
        )

        assert model.dartrans.before.goals == [ir.Goal(name="a")]
        assert codes(diagnostics) == [ir.DiagnosticCode.DUPLICATE_SECTION]

    def test_repeated_dartrans_first_wins(self):
        model, diagnostics = parse_dartwin_with_diagnostics(
            "#dartwin T { #dartrans { #core { #goal a; } } #dartrans { #core { #goal b; } } }"
        )

        assert model.dartrans.core.goals == [ir.Goal(name="a")]
        assert codes(diagnostics) == [ir.DiagnosticCode.DUPLICATE_SECTION]


class TestParseErrors:
    """Tests for parse error context and file parsing."""

    def test_error_location(self):
        error = make_parse_error("Expected 'to', got ';'", Path("farm.dartwin"), 3, 16)

        assert isinstance(error, ParseError)
        assert error.context.format() == "farm.dartwin:3:16"
        assert str(error) == "farm.dartwin:3:16\nExpected 'to', got ';'"

    def test_error_without_file(self):
        error = make_parse_error("Expected a name, got end of input", None, 1, 1)

        assert error.context.format() == "<text>:1:1"

    def test_parse_file(self, strawberry_file, strawberry_model):
        model, diagnostics = parse_file(strawberry_file)

        assert model == strawberry_model
        assert diagnostics == []
