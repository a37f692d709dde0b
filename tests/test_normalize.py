from geomarcos.extraction.normalize import normalize_string, normalize_text, strip_accents


def test_normalize_text_uppercases_and_keeps_angle_marks() -> None:
    raw = "vértice FHV-M-0159, Longitude:-49°28'14,978\""
    assert normalize_text(raw) == "VÉRTICE FHV-M-0159, LONGITUDE:-49°28'14,978\""


def test_normalize_text_keeps_ordinal_and_prime_symbols() -> None:
    assert normalize_text("matrícula nº 12.345 – 10º 5′ 3″") == "MATRÍCULA Nº 12.345 – 10º 5′ 3″"


def test_normalize_text_composes_decomposed_accents() -> None:
    decomposed = "a\u0301rea"
    assert normalize_text(decomposed) == "ÁREA"


def test_normalize_text_empty_inputs() -> None:
    assert normalize_text(None) == ""
    assert normalize_text("") == ""


def test_normalize_string_collapses_spaces() -> None:
    assert normalize_string("  Fazenda   Boa\tVista  ") == "Fazenda Boa Vista"


def test_strip_accents() -> None:
    assert strip_accents("PARANÁ") == "PARANA"
    assert strip_accents("SÃO PAULO") == "SAO PAULO"
