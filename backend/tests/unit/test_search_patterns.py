"""Tests for free-text search in the repositories: LIKE wildcards in the term are literal."""

from adjusterhub.repositories.base import contains_pattern
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.repositories.user_repo import UserRepository


class TestContainsPattern:
    def test_plain_term(self):
        assert contains_pattern("roof") == "%roof%"

    def test_wildcards_escaped(self):
        assert contains_pattern("100%") == "%100\\%%"
        assert contains_pattern("a_b") == "%a\\_b%"

    def test_escape_character_doubled(self):
        assert contains_pattern("c:\\x") == "%c:\\\\x%"


class TestRepositorySearch:
    def test_percent_in_claim_search_is_literal(self, db, make_firm, make_claim):
        firm = make_firm()
        wanted = make_claim(firm, title="Roof 100% loss")
        make_claim(firm, title="Roof 1000 sq ft")

        items, total = ClaimRepository(db).search(search="100%")
        assert total == 1
        assert [c.id for c in items] == [wanted.id]

    def test_underscore_in_user_search_is_literal(self, db, make_user):
        wanted = make_user(email="jo_smith@example.com")
        make_user(email="joxsmith@example.com")

        items, total = UserRepository(db).search(search="jo_smith")
        assert total == 1
        assert items[0].id == wanted.id
