"""HTML served on the studio routes.

The studio page embeds the external browsing UI in a frame and relays its
``query``/``transaction`` postMessages to this page's own URL with POST.
"""

STUDIO_EMBED_URL = "https://studio.outerbase.com/embed/starbase"
STUDIO_ICON_URL = "https://studio.outerbase.com/icons/outerbase.ico"

_STUDIO_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <style>
      html,
      body {
        padding: 0;
        margin: 0;
        width: 100vw;
        height: 100vh;
      }

      iframe {
        width: 100vw;
        height: 100vh;
        overflow: hidden;
        border: 0;
      }
    </style>
    <title>__TITLE__</title>
    <link rel="icon" type="image/x-icon" href="__ICON_URL__" />
  </head>
  <body>
    <script>
      function reply(message) {
        document.getElementById("editor").contentWindow.postMessage(message, "*");
      }

      function handler(e) {
        if (e.data.type !== "query" && e.data.type !== "transaction") return;

        fetch(window.location.pathname + window.location.search, {
          method: "post",
          headers: { "Content-Type": "application/json" },
          body: JSON.stringify(e.data),
        })
          .then((r) => {
            if (!r.ok) {
              reply({ id: e.data.id, type: e.data.type, error: "Something went wrong" });
              throw new Error("Something went wrong");
            }
            return r.json();
          })
          .then((r) => {
            if (r.error) {
              reply({ id: e.data.id, type: e.data.type, error: r.error });
              return;
            }
            reply({ id: e.data.id, type: e.data.type, data: r.result });
          })
          .catch(console.error);
      }

      window.addEventListener("message", handler);
    </script>

    <iframe
      id="editor"
      allow="clipboard-read; clipboard-write"
      src="__EMBED_URL__"
    ></iframe>
  </body>
</html>
"""

_HOMEPAGE_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <title>__TITLE__</title>
    <style>
      html, body {
        font-size: 20px;
        font-family: monospace;
        padding: 1rem;
      }

      #name, #submit {
        font-size: 1rem;
        padding: 0.2rem 0.5rem;
        outline: none;
        font-family: monospace;
      }

      h1 { font-size: 1.5rem; }

      p {
        padding: 0;
        margin: 10px 0;
      }
    </style>
  </head>
  <body>
    <h1>__TITLE__</h1>

    <form method="get" action="">
      <p>Instance name</p>
      <div style="padding-left: 20px">
        <input id="name" name="id" placeholder="name" required />
        <button id="submit">View</button>
      </div>
    </form>
  </body>
</html>
"""


def render_studio_page(title: str = "SQL Studio", embed_url: str = STUDIO_EMBED_URL) -> str:
    return (
        _STUDIO_TEMPLATE
        .replace("__TITLE__", title)
        .replace("__ICON_URL__", STUDIO_ICON_URL)
        .replace("__EMBED_URL__", embed_url)
    )


def render_homepage(title: str = "SQL Studio") -> str:
    return _HOMEPAGE_TEMPLATE.replace("__TITLE__", title)
