"""
Inline source-text helpers.

Hosted-language literals are written as ordinary Python strings and
interpreted at run time:

    history = cljread(
        '''
        [{:index 0 :type :invoke :process 0 :f :txn :value [[:r 1 nil] [:w 1 2]]}
         {:index 1 :type :ok :process 0 :f :txn :value [[:r 1 2] [:w 1 2]]}]
        '''
    )
    add_key = cljeval("#(assoc % :new-key :new-value)")
"""

from __future__ import annotations

import textwrap

from cljbridge.namespace import eval_string, read_string
from cljbridge.value import OpaqueValue


def join_forms(*forms: str) -> str:
    """Dedent each fragment and join them into one source text."""
    return "\n".join(textwrap.dedent(form).strip() for form in forms if form.strip())


def cljread(*forms: str) -> OpaqueValue:
    """Read the joined fragments as data (see :func:`read_string`)."""
    return read_string(join_forms(*forms))


def cljeval(*forms: str) -> OpaqueValue:
    """Evaluate the joined fragments as code (see :func:`eval_string`)."""
    return eval_string(join_forms(*forms))
