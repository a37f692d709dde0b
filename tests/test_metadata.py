import pytest

from geomarcos.extraction.metadata import MetadataExtractor, state_code

DOCUMENT = """MEMORIAL DESCRITIVO
Imóvel: Fazenda Boa Vista
Matrícula Nº 12.345
Proprietários:
João da Silva
Maria de Souza
----

Comarca: Ponta Grossa
Município: Ponta Grossa - PR
Estado do Paraná
Área: 5,0 ha
Perímetro: 1.234,56 m
"""


def test_extracts_full_metadata() -> None:
    metadata, diagnostics = MetadataExtractor().extract(DOCUMENT)
    assert metadata.imovel == "FAZENDA BOA VISTA"
    assert metadata.matricula == "12.345"
    assert metadata.proprietarios == ["JOÃO DA SILVA", "MARIA DE SOUZA"]
    assert metadata.comarca == "PONTA GROSSA"
    assert metadata.municipio == "PONTA GROSSA"
    assert metadata.uf == "PR"
    assert metadata.area_m2 == pytest.approx(50000.0)
    assert metadata.perimetro_m == pytest.approx(1234.56)
    assert diagnostics.field_errors == {}
    assert diagnostics.field_hits["matricula"] == 0


def test_registration_number_variants() -> None:
    metadata, _ = MetadataExtractor().extract("MATRÍCULA Nº 12.345")
    assert metadata.matricula == "12.345"
    metadata, _ = MetadataExtractor().extract("imóvel matriculado sob o nº 7.890 do registro")
    assert metadata.matricula == "7.890"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("ÁREA: 5,0 ha", 50000.0),
        ("Área: 12.345,67 m²", 12345.67),
        ("área superficial de 2,5 hectares", 25000.0),
        ("área total de 800,00 m2", 800.0),
    ],
)
def test_area_is_always_square_metres(text: str, expected: float) -> None:
    metadata, _ = MetadataExtractor().extract(text)
    assert metadata.area_m2 == pytest.approx(expected)


def test_missing_fields_stay_empty() -> None:
    metadata, diagnostics = MetadataExtractor().extract("texto sem nenhum campo conhecido")
    assert metadata.found_fields() == []
    assert metadata.as_dict() == {}
    assert diagnostics.field_hits == {}


def test_unparsable_number_is_reported_not_raised() -> None:
    metadata, diagnostics = MetadataExtractor().extract("Perímetro: ., m")
    assert metadata.perimetro_m is None
    assert "perimetro" in diagnostics.field_errors


def test_single_owner_line() -> None:
    metadata, _ = MetadataExtractor().extract("Proprietário: Ana Pereira\nComarca: Curitiba")
    assert metadata.proprietarios == ["ANA PEREIRA"]


@pytest.mark.parametrize(
    "name, expected",
    [
        ("PARANÁ", "PR"),
        ("Paraná", "PR"),
        ("PARÁ", "PA"),
        ("SÃO PAULO", "SP"),
        ("MATO GROSSO DO SUL", "MS"),
        ("MATO GROSSO", "MT"),
        ("RIO GRANDE DO SUL", "RS"),
        ("SANTA CATARINA NA REGIAO SUL", "SC"),
        ("SC", "SC"),
        ("XINGU", "XI"),
    ],
)
def test_state_code(name: str, expected: str) -> None:
    assert state_code(name) == expected


def test_owner_line_followed_by_other_fields() -> None:
    text = "Proprietário: Ana Pereira\nImóvel: Sítio Boa Vista\nMatrícula Nº 12.345\nÁrea: 5,0 ha"
    metadata, _ = MetadataExtractor().extract(text)
    assert metadata.proprietarios == ["ANA PEREIRA"]
    assert metadata.imovel == "SÍTIO BOA VISTA"
    assert metadata.matricula == "12.345"
