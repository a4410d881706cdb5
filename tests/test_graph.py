"""Tests for edge compilation and record accumulation."""

from pathlib import Path

import pytest

from jobgraph.graph import JobGraph, UnresolvedPolicy, compile_edges, resolve_target
from jobgraph.models import DeclarationRecord, Edge, InvocationRecord, SourceLocation

LOC = SourceLocation("app/x.rb", 1)


def _declared(*names: str):
    return [DeclarationRecord(name, LOC) for name in names]


def _invocation(invoking: str, job: str, *candidates: str) -> InvocationRecord:
    return InvocationRecord(LOC, invoking, job, tuple(candidates) or (job,))


def _identity(path: str) -> str:
    return path


def _accept(job):
    return True


def test_resolve_target_takes_first_declared_candidate():
    declared = {"A::B::FooJob", "A::B::C::FooJob"}
    assert resolve_target(["FooJob", "A::FooJob", "A::B::FooJob", "A::B::C::FooJob"], declared) == "A::B::FooJob"
    assert resolve_target(["FooJob"], declared) is None


class TestCompileEdges:
    def test_selects_first_matching_candidate(self):
        edges = compile_edges(
            _declared("A::B::FooJob"),
            [_invocation("A::B::Caller", "FooJob", "FooJob", "A::FooJob", "A::B::FooJob")],
            _accept,
            _identity,
        )
        assert edges == [Edge("A::B::Caller", "A::B::FooJob")]

    def test_bare_match_wins_over_qualified(self):
        edges = compile_edges(
            _declared("FooJob", "A::FooJob"),
            [_invocation("A::Caller", "FooJob", "FooJob", "A::FooJob")],
            _accept,
            _identity,
        )
        assert edges == [Edge("A::Caller", "FooJob")]

    def test_duplicate_pairs_collapse(self):
        invocations = [
            _invocation("Caller", "FooJob"),
            _invocation("Caller", "FooJob"),
            _invocation("Other", "FooJob"),
        ]
        edges = compile_edges(_declared("FooJob"), invocations, _accept, _identity)
        assert edges == [Edge("Caller", "FooJob"), Edge("Other", "FooJob")]

    def test_reject_all_filter_yields_nothing(self):
        invocations = [_invocation("Caller", "FooJob"), _invocation("Other", "BarJob")]
        edges = compile_edges(
            _declared("FooJob", "BarJob"),
            invocations,
            lambda job: False,
            _identity,
            UnresolvedPolicy.KEEP,
        )
        assert edges == []

    def test_filter_sees_resolved_name_or_none(self):
        seen = []

        def record(job):
            seen.append(job)
            return True

        compile_edges(
            _declared("FooJob"),
            [_invocation("Caller", "FooJob"), _invocation("Caller", "MissingJob")],
            record,
            _identity,
        )
        assert seen == ["FooJob", None]

    def test_path_formatter_applies_to_source(self):
        edges = compile_edges(
            _declared("FooJob"),
            [_invocation("/home/dev/app/run.rb", "FooJob")],
            _accept,
            lambda p: p.replace("/home/dev", "~"),
        )
        assert edges == [Edge("~/app/run.rb", "FooJob")]

    @pytest.mark.parametrize(
        "policy, expected",
        [
            (UnresolvedPolicy.DROP, []),
            (UnresolvedPolicy.KEEP, [Edge("Caller", "")]),
            (UnresolvedPolicy.FLAG, [Edge("Caller", "MissingJob?")]),
            ("flag", [Edge("Caller", "MissingJob?")]),
        ],
    )
    def test_unresolved_policy(self, policy, expected):
        edges = compile_edges([], [_invocation("Caller", "MissingJob")], _accept, _identity, policy)
        assert edges == expected

    def test_unknown_policy_raises(self):
        with pytest.raises(ValueError):
            compile_edges([], [], _accept, _identity, "ignore")


class TestJobGraph:
    def test_accumulates_across_directories(self, write_ruby, temp_dir: Path, python_search):
        write_ruby("one/app/jobs/foo_job.rb", "class FooJob < ApplicationJob\nend\n")
        write_ruby("two/app/models/user.rb", "class User\n  def touch\n    FooJob.perform_later(id)\n  end\nend\n")

        graph = JobGraph()
        graph.scan(str(temp_dir / "one"), python_search)
        graph.scan(str(temp_dir / "two"), python_search)

        assert [d.declared_name for d in graph.declarations] == ["FooJob"]
        assert [i.invoking_name for i in graph.invocations] == ["User"]
        assert graph.edges(_accept, _identity) == [Edge("User", "FooJob")]

    def test_mismatched_namespaces_produce_no_edge(
        self, write_ruby, temp_dir: Path, python_search, mixed_namespace_source
    ):
        write_ruby("app/caller.rb", mixed_namespace_source)

        graph = JobGraph()
        graph.scan(str(temp_dir), python_search)

        assert graph.edges(_accept, _identity) == []
