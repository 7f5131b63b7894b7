# tests/conftest.py
"""
Shared fixtures: one reference page, available both as an lxml document
and as an in-memory TreeNode tree.
"""

import pytest

from locator_core.lxml_adapter import parse_html, select
from locator_core.tree import element, iter_elements


REFERENCE_HTML = """<!DOCTYPE html>
<html>
  <head>
    <title>Locator Test</title>
  </head>
  <body>
    <div id="container" class="main-container">
      <header class="header-section" data-testid="header">
        <h1 id="title" class="title-text">Test Page</h1>
      </header>
      <main class="content-section">
        <button data-testid="submit-btn" class="btn btn-primary" role="button" aria-label="Submit Form">
          Submit
        </button>
        <button class="btn btn-secondary" role="button">Cancel</button>
        <button class="btn" id="delete-btn">Delete</button>

        <div class="card" data-id="card-1" data-component-id="card-component">
          <h2 class="card-title">Card 1</h2>
          <p class="card-content">Price: $19.99</p>
          <button class="buy-btn">Buy Now</button>
        </div>

        <div class="card" data-id="card-2">
          <h2 class="card-title">Card 2</h2>
          <p class="card-content">Price: $29.99</p>
          <button class="buy-btn">Buy Now</button>
        </div>

        <form name="test-form" class="form-container">
          <input type="text" name="username" placeholder="Username" />
          <input type="email" name="email" placeholder="Email" />
          <button type="submit" class="submit-btn" role="button">Submit Form</button>
        </form>

        <nav role="navigation" class="nav-menu">
          <a href="/home" class="nav-link">Home</a>
          <a href="/about" class="nav-link">About</a>
        </nav>

        <div class="card hash-class-css-1x92ab sc-Ax9z jsx-123456">
          <h2>Card with Hash Classes</h2>
          <p>This card has hash classes that should be filtered</p>
        </div>
      </main>
      <footer class="footer-section">
        <p class="footer-text">Footer</p>
      </footer>
    </div>
    <script src="/static/preset.js"></script>
  </body>
</html>
"""


def build_reference_tree():
    """The reference page as TreeNodes (head and script omitted)."""
    return element(
        "html", None,
        element(
            "body", None,
            element(
                "div", {"id": "container", "class": "main-container"},
                element(
                    "header", {"class": "header-section", "data-testid": "header"},
                    element("h1", {"id": "title", "class": "title-text"}, "Test Page"),
                ),
                element(
                    "main", {"class": "content-section"},
                    element(
                        "button",
                        {
                            "data-testid": "submit-btn",
                            "class": "btn btn-primary",
                            "role": "button",
                            "aria-label": "Submit Form",
                        },
                        "\n  Submit\n",
                    ),
                    element("button", {"class": "btn btn-secondary", "role": "button"}, "Cancel"),
                    element("button", {"class": "btn", "id": "delete-btn"}, "Delete"),
                    element(
                        "div", {"class": "card", "data-id": "card-1", "data-component-id": "card-component"},
                        element("h2", {"class": "card-title"}, "Card 1"),
                        element("p", {"class": "card-content"}, "Price: $19.99"),
                        element("button", {"class": "buy-btn"}, "Buy Now"),
                    ),
                    element(
                        "div", {"class": "card", "data-id": "card-2"},
                        element("h2", {"class": "card-title"}, "Card 2"),
                        element("p", {"class": "card-content"}, "Price: $29.99"),
                        element("button", {"class": "buy-btn"}, "Buy Now"),
                    ),
                    element(
                        "form", {"name": "test-form", "class": "form-container"},
                        element("input", {"type": "text", "name": "username", "placeholder": "Username"}),
                        element("input", {"type": "email", "name": "email", "placeholder": "Email"}),
                        element("button", {"type": "submit", "class": "submit-btn", "role": "button"}, "Submit Form"),
                    ),
                    element(
                        "nav", {"role": "navigation", "class": "nav-menu"},
                        element("a", {"href": "/home", "class": "nav-link"}, "Home"),
                        element("a", {"href": "/about", "class": "nav-link"}, "About"),
                    ),
                    element(
                        "div", {"class": "card hash-class-css-1x92ab sc-Ax9z jsx-123456"},
                        element("h2", None, "Card with Hash Classes"),
                        element("p", None, "This card has hash classes that should be filtered"),
                    ),
                ),
                element(
                    "footer", {"class": "footer-section"},
                    element("p", {"class": "footer-text"}, "Footer"),
                ),
            ),
        ),
    )


def by_attr(root, name, value):
    """First TreeNode (document order) whose attribute equals value."""
    for node in iter_elements(root):
        if node.get_attribute(name) == value:
            return node
    raise LookupError(f"no element with {name}={value!r}")


@pytest.fixture
def page():
    """Reference page parsed with lxml."""
    return parse_html(REFERENCE_HTML)


@pytest.fixture
def tree():
    """Reference page as an in-memory tree."""
    return build_reference_tree()


@pytest.fixture
def q(page):
    """Pick one element of the lxml page with a full XPath query."""
    def _q(expression):
        node = select(page, expression)
        assert node is not None, f"reference page has no match for {expression}"
        return node
    return _q
