import pytest

from helpers import write_tree


@pytest.fixture
def project(tmp_path):
    """A small project: config, two pages, one theme partial, one asset."""
    write_tree(
        tmp_path,
        {
            "mllt.toml": (
                "[site]\n"
                'baseURL = "example.com"\n'
                'publishdir = "output"\n'
                'content = "content"\n'
                'theme = "theme"\n'
                'assets = "assets"\n'
                "\n"
                "[params]\n"
                'title = "Hi"\n'
            ),
            "content/index.hbs": '{{#theme "main"}}{{params.title}}{{/theme}}',
            "content/blog/post.hbs": '{{#theme "main"}}<p>{{page}}</p>{{/theme}}',
            "theme/main.hbs": "{{{content}}}",
            "assets/css/site.css": "body { color: red; }",
        },
    )
    return tmp_path
