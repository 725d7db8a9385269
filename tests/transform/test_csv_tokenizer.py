from realty_import.infra.sources.csv_tokenizer import CsvTextSource, readCsvText, split_line, tokenize


def test_split_line_trims_cells():
    assert split_line(" a , b ,c ") == ["a", "b", "c"]


def test_split_line_keeps_commas_inside_quotes():
    assert split_line('123 Main St,"$100,000",3%') == ["123 Main St", "$100,000", "3%"]


def test_split_line_keeps_trailing_empty_cell():
    assert split_line("a,b,") == ["a", "b", ""]


def test_doubled_quote_is_toggle_not_literal():
    # "" закрывает и снова открывает кавычки, литерала нет
    assert split_line('"say ""hi"", ok",x') == ["say hi, ok", "x"]


def test_tokenize_skips_blank_lines_and_keeps_physical_line_numbers():
    text = "ADDRESS,PRICE\r\n\r\n   \n1 Main,100\r2 Oak,200\n"
    records = list(tokenize(text))

    assert [r.line_no for r in records] == [1, 4, 5]
    assert records[1].values == ("1 Main", "100")
    assert records[2].record_id == "line:5"


def test_tokenize_empty_text_yields_nothing():
    assert list(tokenize("")) == []
    assert list(tokenize("\n \n\r\n")) == []


def test_csv_text_source_is_restartable():
    source = CsvTextSource("a,b\nc,d\n")
    first = list(source)
    second = list(source)
    assert first == second
    assert len(first) == 2


def test_read_csv_text_strips_bom(tmp_path):
    path = tmp_path / "in.csv"
    path.write_bytes("\ufeffADDRESS,PRICE\n1 Main,100\n".encode("utf-8"))

    text = readCsvText(path)
    records = list(tokenize(text))
    assert records[0].values == ("ADDRESS", "PRICE")
