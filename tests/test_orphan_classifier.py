"""Tests for orphan classification."""

from compose_teardown.services.orphan_classifier import classify_containers, is_orphan

from .conftest import make_container


class TestOrphanClassifier:
    def test_undeclared_service_is_orphan(self):
        containers = [
            make_container("service1", "123"),
            make_container("service2", "456"),
            make_container("service_orphan", "321"),
        ]

        declared, orphans = classify_containers(containers, {"service1", "service2"})

        assert [c.id for c in declared] == ["123", "456"]
        assert [c.id for c in orphans] == ["321"]

    def test_one_off_container_is_orphan_even_if_declared(self):
        container = make_container("service1", "999", one_off=True)

        assert is_orphan(container, {"service1"}) is True

    def test_unknown_declaration_only_flags_one_off(self):
        containers = [
            make_container("service1", "123"),
            make_container("anything", "456"),
            make_container("service_orphan", "321", one_off=True),
        ]

        declared, orphans = classify_containers(containers, None)

        assert [c.id for c in declared] == ["123", "456"]
        assert [c.id for c in orphans] == ["321"]

    def test_empty_declaration_makes_everything_orphan(self):
        containers = [make_container("service1", "123")]

        declared, orphans = classify_containers(containers, set())

        assert declared == []
        assert orphans == containers

    def test_classification_does_not_modify_input(self):
        containers = [make_container("service1", "123"), make_container("x", "1")]
        snapshot = list(containers)

        classify_containers(containers, {"service1"})

        assert containers == snapshot
