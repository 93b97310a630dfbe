"""
Property-based tests for the country catalog loader.

Uses Hypothesis to generate catalog payloads in the upstream
``{name: {common}, cca2}`` shape.
"""

import asyncio

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from covid_dashboard.api_client import ApiClient
from covid_dashboard.catalog import (
    CountryCatalogLoader,
    collation_key,
    normalize_catalog,
    normalize_country,
)
from covid_dashboard.exceptions import FetchError, MalformedPayloadError
from covid_dashboard.models import Country


COUNTRIES_URL = "https://countries.example/v3.1/all"


# Strategies for generating test data

country_name = st.text(
    alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Zs", "Mn")),
    min_size=1,
    max_size=30,
).filter(lambda s: s.strip())

cca2 = st.text(
    alphabet=st.sampled_from("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"),
    min_size=2,
    max_size=2,
)


@st.composite
def country_record_strategy(draw) -> dict:
    """Generate a raw restcountries-style record with extra fields."""
    return {
        "name": {"common": draw(country_name), "official": "ignored"},
        "cca2": draw(cca2),
        "region": draw(st.sampled_from(["Europe", "Asia", "Americas"])),
    }


def make_loader(handler) -> CountryCatalogLoader:
    client = ApiClient(transport=httpx.MockTransport(handler))
    return CountryCatalogLoader(client, COUNTRIES_URL)


class TestCatalogSortingProperty:
    """
    **Property: the catalog is sorted by name under locale comparison**
    """

    @given(records=st.lists(country_record_strategy(), max_size=40))
    @settings(max_examples=100)
    def test_catalog_is_sorted_by_name(self, records: list[dict]) -> None:
        countries = normalize_catalog(records)

        keys = [collation_key(country.name) for country in countries]
        assert keys == sorted(keys)

    @given(records=st.lists(country_record_strategy(), max_size=40))
    @settings(max_examples=100)
    def test_every_code_is_lowercase(self, records: list[dict]) -> None:
        countries = normalize_catalog(records)

        assert len(countries) == len(records)
        for country in countries:
            assert country.code == country.code.lower()

    def test_accented_names_sort_with_their_base_letter(self) -> None:
        records = [
            {"name": {"common": "Zimbabwe"}, "cca2": "ZW"},
            {"name": {"common": "Åland Islands"}, "cca2": "AX"},
            {"name": {"common": "Albania"}, "cca2": "AL"},
            {"name": {"common": "Curaçao"}, "cca2": "CW"},
            {"name": {"common": "Cuba"}, "cca2": "CU"},
            {"name": {"common": "Réunion"}, "cca2": "RE"},
            {"name": {"common": "Romania"}, "cca2": "RO"},
        ]

        names = [country.name for country in normalize_catalog(records)]

        assert names == [
            "Åland Islands", "Albania", "Cuba", "Curaçao",
            "Réunion", "Romania", "Zimbabwe",
        ]

    def test_case_is_ignored(self) -> None:
        records = [
            {"name": {"common": "united states"}, "cca2": "US"},
            {"name": {"common": "Uganda"}, "cca2": "UG"},
        ]

        names = [country.name for country in normalize_catalog(records)]

        assert names == ["Uganda", "united states"]


class TestRecordNormalization:
    def test_extracts_common_name_and_lowercase_code(self) -> None:
        record = {"name": {"common": "Germany", "official": "Federal Republic of Germany"},
                  "cca2": "DE", "cca3": "DEU"}

        assert normalize_country(record) == Country(name="Germany", code="de")

    @pytest.mark.parametrize("record", [
        "Germany",
        {"name": "Germany", "cca2": "DE"},
        {"name": {"official": "Germany"}, "cca2": "DE"},
        {"name": {"common": "Germany"}},
        {"name": {"common": ""}, "cca2": "DE"},
    ])
    def test_incomplete_records_are_malformed(self, record) -> None:
        with pytest.raises(MalformedPayloadError):
            normalize_country(record)

    def test_catalog_must_be_a_list(self) -> None:
        with pytest.raises(MalformedPayloadError):
            normalize_catalog({"status": 400, "message": "Bad Request"})


class TestCountryCatalogLoader:
    def test_load_returns_sorted_catalog(self) -> None:
        payload = [
            {"name": {"common": "Peru"}, "cca2": "PE"},
            {"name": {"common": "Chile"}, "cca2": "CL"},
        ]
        loader = make_loader(lambda request: httpx.Response(200, json=payload))

        countries = asyncio.run(loader.load())

        assert countries == [Country("Chile", "cl"), Country("Peru", "pe")]

    def test_load_is_idempotent(self) -> None:
        payload = [{"name": {"common": "Peru"}, "cca2": "PE"}]
        loader = make_loader(lambda request: httpx.Response(200, json=payload))

        assert asyncio.run(loader.load()) == asyncio.run(loader.load())

    @pytest.mark.parametrize("response", [
        httpx.Response(500),
        httpx.Response(429),
        httpx.Response(200, content=b"<html>not json</html>"),
        httpx.Response(200, json={"not": "a list"}),
        httpx.Response(200, json=[{"cca2": "PE"}]),
    ])
    def test_failures_become_countries_fetch_error(self, response: httpx.Response) -> None:
        loader = make_loader(lambda request: response)

        with pytest.raises(FetchError) as exc_info:
            asyncio.run(loader.load())

        assert exc_info.value.stage == "countries"
        assert exc_info.value.__cause__ is not None
