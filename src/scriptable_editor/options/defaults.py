"""Code defaults for host options."""

# Soft-wrap long lines across rows.
WRAP = True

# Break wrapped lines only at break-at characters.
LINE_BREAK = False

# Break-at class selected at startup.
BREAK_AT = "ascii"

# Built-in break-at classes: name -> characters a wrapped line may break at.
# "ascii" is the classic Vim 'breakat' set (space, tab and ASCII punctuation).
BREAK_AT_CLASSES: dict[str, str] = {
    "ascii": " \t!@*-+;:,./?",
    "whitespace": " \t",
}
