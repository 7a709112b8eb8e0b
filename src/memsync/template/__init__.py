"""Memory document model, markdown codec, merge rules and text extraction.

Layout of the canonical document:
    # myAI Memory

    # <Section Title>
    ## <Section Description>
    -~- <Key>: <Value>

Sections and keys are matched case-insensitively everywhere.
"""
