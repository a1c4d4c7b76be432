import logging

logger = logging.getLogger(__name__)

# Token types
EOF = 'EOF'
IDENTIFIER = 'IDENTIFIER'
NUMBER = 'NUMBER'
STRING = 'STRING'
ERROR = 'ERROR' # Scan error, message carried in the literal

DIGITS = '0123456789'

# Keywords - Using "KW_" prefix for clarity in token type
KW_AND = 'KW_AND'
KW_BREAK = 'KW_BREAK'
KW_CLASS = 'KW_CLASS'
KW_CONTINUE = 'KW_CONTINUE'
KW_ELSE = 'KW_ELSE'
KW_FALSE = 'KW_FALSE'
KW_FOR = 'KW_FOR'
KW_FUN = 'KW_FUN'
KW_IF = 'KW_IF'
KW_NIL = 'KW_NIL'
KW_OR = 'KW_OR'
KW_PRINT = 'KW_PRINT'
KW_RETURN = 'KW_RETURN'
KW_SUPER = 'KW_SUPER' # Reserved, no grammar uses it
KW_THIS = 'KW_THIS'
KW_TRUE = 'KW_TRUE'
KW_VAR = 'KW_VAR'
KW_WHILE = 'KW_WHILE'

KEYWORDS = {
    'and': KW_AND, 'break': KW_BREAK, 'class': KW_CLASS, 'continue': KW_CONTINUE,
    'else': KW_ELSE, 'false': KW_FALSE, 'for': KW_FOR, 'fun': KW_FUN, 'if': KW_IF,
    'nil': KW_NIL, 'or': KW_OR, 'print': KW_PRINT, 'return': KW_RETURN,
    'super': KW_SUPER, 'this': KW_THIS, 'true': KW_TRUE, 'var': KW_VAR,
    'while': KW_WHILE
}

# Symbols - Using "SYM_" prefix for clarity
SYM_LPAREN = 'SYM_LPAREN'
SYM_RPAREN = 'SYM_RPAREN'
SYM_LBRACE = 'SYM_LBRACE'
SYM_RBRACE = 'SYM_RBRACE'
SYM_COMMA = 'SYM_COMMA'
SYM_DOT = 'SYM_DOT'
SYM_MINUS = 'SYM_MINUS'
SYM_PLUS = 'SYM_PLUS'
SYM_SEMICOLON = 'SYM_SEMICOLON'
SYM_SLASH = 'SYM_SLASH'
SYM_STAR = 'SYM_STAR'
SYM_QUESTION = 'SYM_QUESTION'
SYM_COLON = 'SYM_COLON'
SYM_BANG = 'SYM_BANG'
SYM_BANG_EQUAL = 'SYM_BANG_EQUAL'
SYM_ASSIGN = 'SYM_ASSIGN' # Assignment '='
SYM_EQUAL_EQUAL = 'SYM_EQUAL_EQUAL'
SYM_GT = 'SYM_GT'
SYM_GTE = 'SYM_GTE'
SYM_LT = 'SYM_LT'
SYM_LTE = 'SYM_LTE'


SYMBOLS = {
    '(': SYM_LPAREN, ')': SYM_RPAREN, '{': SYM_LBRACE, '}': SYM_RBRACE,
    ',': SYM_COMMA, '.': SYM_DOT, '-': SYM_MINUS, '+': SYM_PLUS,
    ';': SYM_SEMICOLON, '/': SYM_SLASH, '*': SYM_STAR, '?': SYM_QUESTION,
    ':': SYM_COLON, '!': SYM_BANG, '!=': SYM_BANG_EQUAL, '=': SYM_ASSIGN,
    '==': SYM_EQUAL_EQUAL, '>': SYM_GT, '>=': SYM_GTE, '<': SYM_LT, '<=': SYM_LTE
}


class Token:
    def __init__(self, type, lexeme, literal, line, column=0):
        self.type = type
        self.lexeme = lexeme
        self.literal = literal # float for NUMBER, str for STRING, message for ERROR
        self.line = line
        self.column = column

    def __repr__(self):
        return f"Token({self.type!r}, {self.lexeme!r}, {self.literal!r}, line={self.line}, col={self.column})"

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return (self.type == other.type and
                self.lexeme == other.lexeme and
                self.literal == other.literal and
                self.line == other.line and
                self.column == other.column)

    def __hash__(self):
        return hash((self.type, self.lexeme, self.line, self.column))


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = self.text[self.pos] if self.pos < len(self.text) else None
        self.line = 1
        self.column = 1
        self.keywords = KEYWORDS
        self.symbols = SYMBOLS
        # Sort by length descending to match longer symbols first (e.g., ">=" before ">")
        self.sorted_symbol_keys = sorted(self.symbols.keys(), key=len, reverse=True)

    def advance(self):
        if self.current_char == '\n':
            self.line += 1
            self.column = 1
        elif self.current_char is not None: # Don't advance column for EOF
            self.column += 1

        self.pos += 1
        if self.pos < len(self.text):
            self.current_char = self.text[self.pos]
        else:
            self.current_char = None

    def peek(self, n=1):
        peek_pos = self.pos + n
        if peek_pos < len(self.text):
            return self.text[peek_pos]
        return None

    def skip_whitespace(self):
        while self.current_char is not None and self.current_char in ' \t\r\n':
            self.advance()

    def skip_line_comment(self):
        while self.current_char is not None and self.current_char != '\n':
            self.advance()

    def skip_block_comment(self):
        """
        Skips a '/* ... */' comment, honouring nested pairs.
        Returns an ERROR token if input ends before the comment closes, else None.
        """
        start_line = self.line
        start_column = self.column
        self.advance() # '/'
        self.advance() # '*'
        nesting = 1
        while nesting > 0:
            if self.current_char is None:
                return Token(ERROR, '/*', "Unterminated C-style comment.", start_line, start_column)
            if self.current_char == '*' and self.peek() == '/':
                nesting -= 1
                self.advance()
            elif self.current_char == '/' and self.peek() == '*':
                nesting += 1
                self.advance()
            self.advance()
        return None

    def _identifier(self):
        start_line = self.line
        start_column = self.column
        value = ''
        while self.current_char is not None and (self.current_char.isalnum() or self.current_char == '_'):
            value += self.current_char
            self.advance()

        token_type = self.keywords.get(value, IDENTIFIER)
        return Token(token_type, value, None, start_line, start_column)

    def _number(self):
        start_line = self.line
        start_column = self.column
        num_str = ''
        while self.current_char is not None and self.current_char in DIGITS:
            num_str += self.current_char
            self.advance()

        # A '.' only belongs to the number when a digit follows ("1.method" stays a call)
        if self.current_char == '.' and self.peek() is not None and self.peek() in DIGITS:
            num_str += self.current_char
            self.advance()
            while self.current_char is not None and self.current_char in DIGITS:
                num_str += self.current_char
                self.advance()

        return Token(NUMBER, num_str, float(num_str), start_line, start_column)

    def _string(self):
        start_line = self.line
        start_column = self.column
        self.advance()  # Consume opening quote
        value = ''
        while self.current_char is not None and self.current_char != '"':
            value += self.current_char
            self.advance()

        if self.current_char is None:
            # Reported where the input ran out
            return Token(ERROR, '"' + value, "Unterminated string.", self.line, self.column)
        self.advance()  # Consume closing quote
        return Token(STRING, '"' + value + '"', value, start_line, start_column)

    def tokens(self):
        while True:
            if self.current_char is None: # EOF
                yield Token(EOF, '', None, self.line, self.column)
                break

            if self.current_char in ' \t\r\n':
                self.skip_whitespace()
                continue

            if self.current_char == '/' and self.peek() == '/':
                self.skip_line_comment()
                continue

            if self.current_char == '/' and self.peek() == '*':
                error_token = self.skip_block_comment()
                if error_token is not None:
                    yield error_token
                continue

            if self.current_char.isalpha() or self.current_char == '_':
                yield self._identifier() # Advances
                continue

            if self.current_char in DIGITS:
                yield self._number() # Advances
                continue

            if self.current_char == '"':
                yield self._string() # Advances
                continue

            # Match symbols
            symbol_matched = False
            for s_key in self.sorted_symbol_keys:
                if self.text.startswith(s_key, self.pos):
                    token_type = self.symbols[s_key]
                    # Capture position before advancing for the symbol
                    sym_start_line, sym_start_col = self.line, self.column
                    for _ in range(len(s_key)):
                        self.advance()
                    yield Token(token_type, s_key, None, sym_start_line, sym_start_col)
                    symbol_matched = True
                    break

            if symbol_matched:
                continue

            # If no token matched
            err_char = self.current_char
            err_line = self.line
            err_col = self.column
            self.advance() # Consume the unexpected character
            yield Token(ERROR, err_char, "Unexpected character.", err_line, err_col)

    def lex(self):
        tokens = list(self.tokens())
        logger.debug("Scanned %d tokens over %d lines", len(tokens), self.line)
        return tokens
