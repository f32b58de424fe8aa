import json

from searchindex.storage import json_writer
from searchindex.storage.inverted_index import QueryResult


def test_array():
    assert json_writer.to_string(json_writer.as_array, [1, 2]) == "[\n\t1,\n\t2\n]"
    assert json_writer.to_string(json_writer.as_array, []) == "[\n]"


def test_object_escapes_keys():
    text = json_writer.to_string(json_writer.as_object, {'say "hi"': 1, "b": 2})

    assert text == '{\n\t"say \\"hi\\"": 1,\n\t"b": 2\n}'
    assert json.loads(text) == {'say "hi"': 1, "b": 2}


def test_nested_array():
    text = json_writer.to_string(json_writer.as_nested_array, {"a": [1, 3], "b": [2]})
    assert text == '{\n\t"a": [\n\t\t1,\n\t\t3\n\t],\n\t"b": [\n\t\t2\n\t]\n}'


def test_query_results_use_eight_decimal_scores():
    text = json_writer.to_string(json_writer.as_query_results, {"run": [QueryResult("a", 1, 0.2)]})

    assert text == (
        '{\n'
        '\t"run": [\n'
        '\t\t{\n'
        '\t\t\t"where": "a",\n'
        '\t\t\t"count": 1,\n'
        '\t\t\t"score": 0.20000000\n'
        '\t\t}\n'
        '\t]\n'
        '}'
    )


def test_query_without_results():
    text = json_writer.to_string(json_writer.as_query_results, {"zebra": []})

    assert text == '{\n\t"zebra": [\n\t]\n}'
    assert json.loads(text) == {"zebra": []}


def test_write_file_is_utf8(tmp_path):
    path = tmp_path / "out.json"
    json_writer.write_file(json_writer.as_object, {"café": 1}, path)

    assert path.read_text(encoding="utf-8") == '{\n\t"café": 1\n}'
