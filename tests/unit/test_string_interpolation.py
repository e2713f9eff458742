from c2ci.UTILS.string_interpolation import EnvironmentInterpolator

def test_interpolate_forms():
    context = {'NAME': 'web', 'EMPTY': ''}
    text, missing = EnvironmentInterpolator.interpolate(
        "${NAME} ${EMPTY:-fallback} ${NAME:+set} ${EMPTY:+set}|", context)
    assert text == "web fallback set |"
    assert missing == []

def test_missing_variables_reported_once():
    text, missing = EnvironmentInterpolator.interpolate("${A}-${A}-${B}", {})
    assert text == "--"
    assert missing == ['A', 'B']

def test_double_dollar_escape():
    text, _ = EnvironmentInterpolator.interpolate("echo $$HOME $${X}", {'X': 'no'})
    assert text == "echo $HOME ${X}"
