from __future__ import annotations

from html import escape

from mp3_gateway.config import AppConfig
from mp3_gateway.models import SUPPORTED_EXTENSIONS


_INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{service} API</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 800px;
            margin: 0 auto;
            padding: 20px;
            line-height: 1.6;
            background: #f5f5f5;
        }}
        .container {{ background: white; padding: 30px; border-radius: 10px; }}
        h1 {{ color: #333; border-bottom: 3px solid #007bff; padding-bottom: 10px; }}
        .endpoint {{ background: #f8f9fa; padding: 15px; border-left: 4px solid #007bff; margin: 15px 0; }}
        .method {{ color: white; padding: 4px 8px; border-radius: 4px; font-size: 12px; }}
        .method.post {{ background: #28a745; }}
        .method.get {{ background: #17a2b8; }}
        code {{ background: #f1f1f1; padding: 2px 6px; border-radius: 3px; }}
        pre {{ background: #f8f9fa; padding: 15px; border-radius: 5px; overflow-x: auto; }}
        #drop {{ border: 2px dashed #007bff; padding: 30px; text-align: center; border-radius: 8px; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>{service} API</h1>
        <p>Upload a video file and receive its audio track as an MP3 download.
        Active transcoder: <code>{transcoder}</code>.</p>

        <h2>Endpoints</h2>

        <div class="endpoint">
            <span class="method post">POST</span> <code>/api/convert</code>
            <p><strong>Content-Type:</strong> multipart/form-data</p>
            <p><strong>Body:</strong> form field <code>video</code> containing the video file</p>
            <p><strong>Response:</strong> MP3 file download (<code>audio/mpeg</code>)</p>
            <p><strong>Max file size:</strong> {max_size}</p>
        </div>

        <div class="endpoint">
            <span class="method get">GET</span> <code>/api/status</code>
            <p>Service status and upload limits as JSON.</p>
        </div>

        <h2>Try it</h2>
        <div id="drop">
            <input type="file" id="video" accept="{accept}">
            <button id="convert">Convert</button>
            <p id="result"></p>
        </div>

        <h2>cURL</h2>
        <pre><code>curl -X POST -F "video=@your-video.mp4" -o converted.mp3 http://localhost:8000/api/convert</code></pre>

        <h2>Supported formats</h2>
        <ul>
            <li>Input: {formats}</li>
            <li>Output: MP3 (audio/mpeg)</li>
        </ul>

        <h2>Response codes</h2>
        <ul>
            <li><code>200</code> - conversion successful, MP3 file returned</li>
            <li><code>400</code> - bad request (missing file, wrong type, too large)</li>
            <li><code>500</code> - conversion or internal error</li>
            <li><code>503</code> / <code>504</code> - transcoder unavailable or timed out</li>
        </ul>
    </div>
    <script>
        document.getElementById('convert').addEventListener('click', async () => {{
            const input = document.getElementById('video');
            const result = document.getElementById('result');
            if (!input.files.length) {{ result.textContent = 'Pick a video first.'; return; }}
            const form = new FormData();
            form.append('video', input.files[0]);
            result.textContent = 'Converting...';
            const response = await fetch('/api/convert', {{ method: 'POST', body: form }});
            if (!response.ok) {{
                const body = await response.json();
                result.textContent = 'Error: ' + body.message;
                return;
            }}
            const blob = await response.blob();
            const a = document.createElement('a');
            a.href = URL.createObjectURL(blob);
            a.download = input.files[0].name.replace(/\\.[^/.]+$/, '') + '.mp3';
            a.click();
            result.textContent = 'Done.';
        }});
    </script>
</body>
</html>
"""


def render_index_page(config: AppConfig) -> str:
    """Static API documentation with a small upload form."""
    return _INDEX_TEMPLATE.format(
        service=escape(config.service_name),
        transcoder=escape(config.transcoder),
        max_size=escape(config.max_upload_label),
        accept=",".join(SUPPORTED_EXTENSIONS),
        formats=", ".join(ext.lstrip(".").upper() for ext in SUPPORTED_EXTENSIONS),
    )
