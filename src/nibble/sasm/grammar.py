# type: ignore
''' Source line and operand grammar '''

import pyparsing as pp

import nibble.sasm.operands as operands


# Every character str.split() treats as whitespace, not only ASCII
WHITESPACE = (
    '\t\n\x0b\x0c\r\x1c\x1d\x1e\x1f \x85\xa0\u1680'
    '\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a'
    '\u2028\u2029\u202f\u205f\u3000'
)


def g_lexeme(expr):
    return expr.set_whitespace_chars(WHITESPACE)


# Line: tokens separated by whitespace or commas, ';' starts a comment
comment = g_lexeme(pp.Suppress(g_lexeme(pp.Literal(';')) + pp.rest_of_line))
separator = g_lexeme(pp.Suppress(g_lexeme(pp.Literal(','))))
token = g_lexeme(pp.CharsNotIn(',;' + WHITESPACE))
end = g_lexeme(pp.StringEnd())

line = pp.ZeroOrMore(token | separator) + pp.Optional(comment) + end


def g_operand(expr, handler):
    return expr.set_parse_action(lambda r: (handler, r[0]))


# 'b' prefix plus some b/B immediately followed by a digit
bin_const = g_operand(pp.Regex(r'(?=b)(?=.*[bB][0-9]).+'), operands.on_binary)
dec_const = g_operand(pp.Regex(r'[0-9]+'), operands.on_decimal)
reg_ref = g_operand(pp.Regex(r'[a-zA-Z]'), operands.on_register)

# Order matters: a binary literal also looks like a register name
operand = bin_const | dec_const | reg_ref
