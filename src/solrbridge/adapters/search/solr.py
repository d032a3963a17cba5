"""Solr engine client.

Thin client for the two Solr request handlers the indexing core needs:
``/update`` (XML update messages) and ``/select`` (JSON responses).
Requests are plain objects that queue commands; nothing reaches the
network until ``SolrClient.execute()`` is called.

The client speaks the XML update format itself rather than going through
pysolr: pysolr takes field boosts once per ``add()`` call, while each
document here carries its own document and field boosts.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from xml.etree import ElementTree as ET

import httpx

from solrbridge.logger import get_logger
from solrbridge.normalizers import format_solr_date

logger = get_logger(__name__)

MATCH_ALL_QUERY = "*:*"

Command = Tuple[str, Any]


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return format_solr_date(value)
    return str(value)


def _format_boost(boost: float) -> str:
    return repr(float(boost))


class SolrDocument:
    """A Solr input document: ordered fields, document boost, field boosts."""

    def __init__(self):
        self.fields: Dict[str, Any] = {}
        self.boost: Optional[float] = None
        self.field_boosts: Dict[str, float] = {}

    def set_boost(self, boost: float) -> None:
        self.boost = boost

    def set_field(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def set_field_boost(self, name: str, boost: float) -> None:
        self.field_boosts[name] = boost

    def get_field_boost(self, name: str) -> Optional[float]:
        return self.field_boosts.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.fields)

    def to_element(self) -> ET.Element:
        """Render as a ``<doc>`` element; lists become repeated fields, None is skipped."""
        doc = ET.Element("doc")
        if self.boost is not None:
            doc.set("boost", _format_boost(self.boost))

        for name, value in self.fields.items():
            values = value if isinstance(value, (list, tuple, set)) else [value]
            boost = self.field_boosts.get(name)
            for item in values:
                if item is None:
                    continue
                field = ET.SubElement(doc, "field", name=name)
                if boost is not None:
                    field.set("boost", _format_boost(boost))
                field.text = _render_value(item)
        return doc

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"SolrDocument(fields={list(self.fields)}, boost={self.boost})"


class SolrUpdateRequest:
    """
    Queues update commands and renders them as one XML ``<update>`` message.

    Example:
        >>> update = client.create_update()
        >>> doc = update.create_document()
        >>> doc.set_field("id", "42")
        >>> update.add_documents([doc])
        >>> update.add_commit()
        >>> client.execute(update)
    """

    def __init__(self):
        self._commands: List[Command] = []

    def create_document(self) -> SolrDocument:
        return SolrDocument()

    def add_documents(self, documents: List[SolrDocument]) -> None:
        if documents:
            self._commands.append(("add", list(documents)))

    def add_commit(self) -> None:
        self._commands.append(("commit", None))

    def add_delete_query(self, query: str) -> None:
        self._commands.append(("delete", query))

    @property
    def commands(self) -> Tuple[Command, ...]:
        return tuple(self._commands)

    def take_commands(self) -> List[Command]:
        """Return the queued commands and empty the queue."""
        commands, self._commands = self._commands, []
        return commands

    @staticmethod
    def render(commands: List[Command]) -> bytes:
        root = ET.Element("update")
        for kind, payload in commands:
            if kind == "add":
                add = ET.SubElement(root, "add")
                for document in payload:
                    add.append(document.to_element())
            elif kind == "commit":
                ET.SubElement(root, "commit")
            elif kind == "delete":
                delete = ET.SubElement(root, "delete")
                ET.SubElement(delete, "query").text = payload
            else:
                raise ValueError(f"Unknown update command: {kind}")
        return ET.tostring(root, encoding="utf-8")

    def to_xml(self) -> bytes:
        """Render the queued commands without consuming them."""
        return self.render(self._commands)

    def __len__(self) -> int:
        return len(self._commands)


class SolrSelectRequest:
    """Keyword query against ``/select``."""

    def __init__(self, query: str = MATCH_ALL_QUERY):
        self.query = query

    def set_query(self, query: str) -> None:
        self.query = query

    def params(self) -> Dict[str, str]:
        return {"q": self.query, "wt": "json"}


class SolrClient:
    """
    HTTP client for one Solr core.

    Errors are not retried: transport failures raise ``httpx.TransportError``
    subclasses and error responses raise ``httpx.HTTPStatusError``.

    Example:
        >>> client = SolrClient("http://localhost:8983/solr/articles")
        >>> client.execute(client.create_select())
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.Client] = None
    ):
        """
        Args:
            base_url: Core URL, e.g. ``http://localhost:8983/solr/articles``
            timeout_seconds: HTTP timeout applied to every request
            http_client: Preconfigured httpx client (auth, transport...)
        """
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        logger.debug(f"Initialized SolrClient for {self.base_url}")

    @property
    def name(self) -> str:
        return "solr"

    def create_update(self) -> SolrUpdateRequest:
        return SolrUpdateRequest()

    def create_select(self) -> SolrSelectRequest:
        return SolrSelectRequest()

    def execute(self, request: Any) -> Dict[str, Any]:
        if isinstance(request, SolrUpdateRequest):
            return self._update(request)
        if isinstance(request, SolrSelectRequest):
            return self._select(request)
        raise TypeError(f"Unsupported request type: {type(request).__name__}")

    def _update(self, request: SolrUpdateRequest) -> Dict[str, Any]:
        commands = request.take_commands()
        if not commands:
            raise ValueError("Update request has no commands to send")

        body = SolrUpdateRequest.render(commands)
        summary = ", ".join(kind for kind, _ in commands)
        logger.debug(f"POST {self.base_url}/update [{summary}] ({len(body)} bytes)")

        with logger.timer("solr_update"):
            response = self._http.post(
                f"{self.base_url}/update",
                params={"wt": "json"},
                content=body,
                headers={"Content-Type": "text/xml; charset=utf-8"},
            )
        response.raise_for_status()
        return response.json()

    def _select(self, request: SolrSelectRequest) -> Dict[str, Any]:
        logger.debug(f"GET {self.base_url}/select q={request.query!r}")
        with logger.timer("solr_select"):
            response = self._http.get(f"{self.base_url}/select", params=request.params())
        response.raise_for_status()
        return response.json()

    def is_available(self) -> bool:
        """Ping the core; True if Solr answers with status OK."""
        try:
            response = self._http.get(f"{self.base_url}/admin/ping", params={"wt": "json"})
            response.raise_for_status()
            return response.json().get("status") == "OK"
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Solr ping failed for {self.base_url}: {e}")
            return False

    def get_version(self) -> str:
        try:
            response = self._http.get(f"{self.base_url}/admin/system", params={"wt": "json"})
            response.raise_for_status()
            return response.json()["lucene"]["solr-spec-version"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.warning(f"Could not read Solr version: {e}")
            return "unknown"

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "SolrClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
