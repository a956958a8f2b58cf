from api_tester.request.variables import find_variables, resolve_values, resolve_variables


class TestResolveVariables:
    def test_known_and_unknown(self):
        text = "{{baseUrl}}/users?key={{apiKey}}&x={{missing}}"
        result = resolve_variables(text, {"baseUrl": "http://localhost:3000", "apiKey": "k"})
        assert result == "http://localhost:3000/users?key=k&x={{missing}}"

    def test_non_strings_pass_through(self):
        assert resolve_variables(5, {"a": "b"}) == 5
        assert resolve_variables("{{a}}", None) == "{{a}}"

    def test_resolve_values(self):
        values = resolve_values({"a": "{{x}}", "b": ["{{x}}", 1], "c": 2}, {"x": "y"})
        assert values == {"a": "y", "b": ["y", 1], "c": 2}


class TestFindVariables:
    def test_first_seen_order_without_duplicates(self):
        assert find_variables("{{b}}/{{a}}/{{b}}") == ["b", "a"]

    def test_no_string(self):
        assert find_variables(None) == []
