"""Unit tests for DiseaseService: localization, caching, fallbacks, writes."""

from __future__ import annotations

import pytest

from src.main import DataLayer
from src.models.disease import CreateDiseaseData, Language, UpdateDiseaseData
from src.utils.errors import BackendUnavailableError, TransportError
from tests.conftest import FakeBackend, FakeClock


class TestGetDiseases:
    @pytest.mark.asyncio
    async def test_localizes_translated_rows(self, data_layer: DataLayer) -> None:
        diseases = await data_layer.diseases.get_diseases("ru", {"active": True})

        assert [d.name for d in diseases] == ["Aksiyal Spondiloartrit", "Ревматоидный артрит"]
        assert diseases[1].current_language is Language.RU
        assert diseases[0].current_language is None

    @pytest.mark.asyncio
    async def test_second_read_served_from_cache(
        self, data_layer: DataLayer, backend: FakeBackend
    ) -> None:
        await data_layer.diseases.get_diseases("uz", {"active": True})
        await data_layer.diseases.get_diseases("uz", {"active": True})

        assert backend.count("select", "diseases") == 1

    @pytest.mark.asyncio
    async def test_list_ttl_comes_from_override(
        self, data_layer: DataLayer, backend: FakeBackend, clock: FakeClock
    ) -> None:
        await data_layer.diseases.get_diseases()
        clock.advance(299)
        await data_layer.diseases.get_diseases()
        clock.advance(2)
        await data_layer.diseases.get_diseases()

        assert backend.count("select", "diseases") == 2

    @pytest.mark.asyncio
    async def test_featured_filter(self, data_layer: DataLayer) -> None:
        featured = await data_layer.diseases.get_diseases("uz", {"featured": True})
        assert [d.slug for d in featured] == ["revmatoid-artrit"]

    @pytest.mark.asyncio
    async def test_offline_fallback_while_unhealthy(
        self, data_layer: DataLayer, backend: FakeBackend
    ) -> None:
        data_layer.breaker.set_health(False)

        diseases = await data_layer.diseases.get_diseases("en")

        assert [d.name for d in diseases] == ["Axial Spondyloarthritis", "Rheumatoid Arthritis"]
        assert backend.count("select") == 0

    @pytest.mark.asyncio
    async def test_transport_failure_then_fallback(
        self, data_layer: DataLayer, backend: FakeBackend
    ) -> None:
        backend.fail_with = TransportError("connect timeout")

        with pytest.raises(TransportError):
            await data_layer.diseases.get_diseases("uz")
        offline = await data_layer.diseases.get_diseases("uz")

        assert offline[0].slug == "aksiyal-spondiloartrit-uz"
        assert backend.count("select", "diseases") == 1


class TestGetDiseaseBySlug:
    @pytest.mark.asyncio
    async def test_base_slug(self, data_layer: DataLayer, backend: FakeBackend) -> None:
        disease = await data_layer.diseases.get_disease_by_slug("revmatoid-artrit", "uz")

        assert disease is not None
        assert disease.id == "2"
        assert backend.count("select_one", "disease_translations") == 1
        assert backend.count("select_one", "diseases") == 1

    @pytest.mark.asyncio
    async def test_translated_slug(self, data_layer: DataLayer, backend: FakeBackend) -> None:
        base = backend.tables["diseases"][1]
        backend.tables["disease_translations"] = [
            {**base["translations"][0], "disease": base},
        ]

        disease = await data_layer.diseases.get_disease_by_slug("revmatoidniy-artrit", "ru")

        assert disease is not None
        assert disease.name == "Ревматоидный артрит"
        assert backend.count("select_one", "diseases") == 0

    @pytest.mark.asyncio
    async def test_missing_slug_cached_as_none(
        self, data_layer: DataLayer, backend: FakeBackend
    ) -> None:
        assert await data_layer.diseases.get_disease_by_slug("nope") is None
        assert await data_layer.diseases.get_disease_by_slug("nope") is None
        assert backend.count("select_one", "diseases") == 1


class TestMutations:
    @pytest.mark.asyncio
    async def test_create_invalidates_lists(
        self, data_layer: DataLayer, backend: FakeBackend
    ) -> None:
        before = await data_layer.diseases.get_diseases("uz", {"active": True})

        created = await data_layer.diseases.create_disease(
            CreateDiseaseData(name="Podagra", slug="podagra", order_index=3)
        )
        after = await data_layer.diseases.get_diseases("uz", {"active": True})

        assert created.slug == "podagra"
        assert len(before) == 2
        assert [d.slug for d in after][-1] == "podagra"
        assert backend.count("select", "diseases") == 2

    @pytest.mark.asyncio
    async def test_update_invalidates_detail(
        self, data_layer: DataLayer, backend: FakeBackend
    ) -> None:
        await data_layer.diseases.get_disease_by_slug("aksiyal-spondiloartrit")

        updated = await data_layer.diseases.update_disease("1", UpdateDiseaseData(featured=True))
        fresh = await data_layer.diseases.get_disease_by_slug("aksiyal-spondiloartrit")

        assert updated is not None and updated.featured is True
        assert fresh is not None and fresh.featured is True

    @pytest.mark.asyncio
    async def test_update_unknown_id_returns_none(self, data_layer: DataLayer) -> None:
        assert await data_layer.diseases.update_disease("999", UpdateDiseaseData(name="X")) is None

    @pytest.mark.asyncio
    async def test_delete_invalidates(self, data_layer: DataLayer) -> None:
        await data_layer.diseases.get_diseases()
        await data_layer.diseases.delete_disease("1")
        remaining = await data_layer.diseases.get_diseases()
        assert [d.id for d in remaining] == ["2"]

    @pytest.mark.asyncio
    async def test_writes_refused_while_unhealthy(
        self, data_layer: DataLayer, backend: FakeBackend
    ) -> None:
        data_layer.breaker.set_health(False)

        with pytest.raises(BackendUnavailableError):
            await data_layer.diseases.create_disease(CreateDiseaseData(name="X", slug="x"))
        assert backend.count("insert") == 0
