from lox.errors import ErrorReporter
from lox.lexer import tokenize
from lox.tokens import TokenType


def types_of(source):
    return [t.type for t in tokenize(source, ErrorReporter())]


def test_punctuation_and_operators():
    assert types_of('(){},.-+;*/ ! != = == < <= > >=') == [
        TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.LEFT_BRACE,
        TokenType.RIGHT_BRACE, TokenType.COMMA, TokenType.DOT, TokenType.MINUS,
        TokenType.PLUS, TokenType.SEMICOLON, TokenType.STAR, TokenType.SLASH,
        TokenType.BANG, TokenType.BANG_EQUAL, TokenType.EQUAL,
        TokenType.EQUAL_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL,
        TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.EOF,
    ]


def test_empty_source_is_just_eof():
    tokens = tokenize('', ErrorReporter())
    assert len(tokens) == 1
    assert tokens[0].type == TokenType.EOF
    assert tokens[0].lexeme == ''
    assert tokens[0].line == 1


def test_keywords_and_identifiers():
    tokens = tokenize('var classy = nil; fun _x1 this', ErrorReporter())
    assert [t.type for t in tokens] == [
        TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.NIL,
        TokenType.SEMICOLON, TokenType.FUN, TokenType.IDENTIFIER,
        TokenType.THIS, TokenType.EOF,
    ]
    assert tokens[1].lexeme == 'classy'
    assert tokens[6].lexeme == '_x1'


def test_number_literals_are_floats():
    tokens = tokenize('12 3.25', ErrorReporter())
    assert tokens[0].literal == 12.0
    assert isinstance(tokens[0].literal, float)
    assert tokens[1].literal == 3.25
    assert tokens[1].lexeme == '3.25'


def test_trailing_dot_is_not_part_of_number():
    tokens = tokenize('123.', ErrorReporter())
    assert [t.type for t in tokens] == [TokenType.NUMBER, TokenType.DOT, TokenType.EOF]
    assert tokens[0].lexeme == '123'


def test_string_literal_spans_lines():
    tokens = tokenize('"a\nb" x', ErrorReporter())
    assert tokens[0].type == TokenType.STRING
    assert tokens[0].literal == 'a\nb'
    assert tokens[1].line == 2


def test_comments_are_skipped_and_lines_counted():
    source = '// line comment\n/* block\n comment */ var\n x'
    tokens = tokenize(source, ErrorReporter())
    assert [t.type for t in tokens] == [TokenType.VAR, TokenType.IDENTIFIER, TokenType.EOF]
    assert tokens[0].line == 3
    assert tokens[1].line == 4


def test_lines_never_decrease():
    tokens = tokenize('a\nb\n\n"s\n"\nc', ErrorReporter())
    lines = [t.line for t in tokens]
    assert lines == sorted(lines)
    assert lines[0] >= 1


def test_unexpected_character_is_reported_and_scanning_continues(capsys):
    reporter = ErrorReporter()
    tokens = tokenize('var @ x;', reporter)
    assert reporter.had_error
    assert [t.type for t in tokens] == [
        TokenType.VAR, TokenType.IDENTIFIER, TokenType.SEMICOLON, TokenType.EOF,
    ]
    assert capsys.readouterr().err.strip() == '[line 1] Error: Unexpected character.'


def test_unterminated_string(capsys):
    reporter = ErrorReporter()
    tokens = tokenize('print "oops\n', reporter)
    assert reporter.had_error
    assert [t.type for t in tokens] == [TokenType.PRINT, TokenType.EOF]
    assert reporter.messages == ['[line 2] Error: Unterminated string.']
