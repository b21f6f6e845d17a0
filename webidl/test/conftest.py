"""Shared fixtures for webidl tests."""

import pytest
import sys
import os

# Add the project root to sys.path so 'webidl' is importable without install
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from webidl.parser import parse


DOM_IDL = """\
// Trimmed from the DOM standard.
[Exposed=Window]
interface Node : EventTarget {
  const unsigned short ELEMENT_NODE = 1;
  readonly attribute unsigned short nodeType;
  readonly attribute DOMString nodeName;
  attribute DOMString? textContent;
  [CEReactions] Node appendChild(Node node);
  boolean isEqualNode(Node? otherNode);
};

/* Mixins are included into interfaces. */
interface mixin ParentNode {
  [SameObject] readonly attribute HTMLCollection children;
  [CEReactions, Unscopable] undefined append((Node or DOMString)... nodes);
};
Node includes ParentNode;

partial interface Node {
  readonly attribute boolean isConnected;
};
"""


FEATURES_IDL = """\
enum ScrollBehavior { "auto", "instant", "smooth", };

typedef (DOMString or sequence<long>) StringOrLongs;

callback FrameRequestCallback = undefined (DOMHighResTimeStamp time);

callback interface EventListener {
  undefined handleEvent(Event event);
};

dictionary ScrollOptions : BaseOptions {
  ScrollBehavior behavior = "auto";
  required unrestricted double top;
  sequence<DOMString> tags = [];
  record<DOMString, any> extra = {};
};

[LegacyFactoryFunction=Image(optional unsigned long width),
 Exposed=(Window,Worker)]
interface Storage {
  constructor(optional DOMString name = "local");
  getter DOMString? (DOMString key);
  setter undefined setItem(DOMString key, DOMString value);
  stringifier;
  static Promise<undefined> clear();
  iterable<DOMString, long>;
  readonly maplike<DOMString, long>;
};

namespace console {
  readonly attribute long level;
  undefined log(any... data);
};
"""


@pytest.fixture
def dom_defs():
    """Parsed DOM excerpt."""
    return parse(DOM_IDL).unwrap()


@pytest.fixture
def feature_defs():
    """Parsed excerpt covering the remaining definition kinds."""
    return parse(FEATURES_IDL).unwrap()
