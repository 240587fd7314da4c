"""
NAF (NLP Annotation Format) reading and writing.

Only the layers the tagger consumes or produces are mapped onto the document
model: the header's linguistic processors, raw text, word forms, terms,
entities and time expressions. A document read from NAF keeps its parsed
tree, and writing it back adds the new processors and annotations to a copy
of that tree, so every other layer and attribute passes through untouched.
"""

import copy
from typing import Dict, List, Set

from lxml import etree

from timex_pipeline.errors import DocumentFormatError
from timex_pipeline.types import (
    Document,
    Entity,
    LinguisticProcessor,
    Term,
    Timex3,
    WordForm,
)

NAF_VERSION = "v3"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _add_span(parent: etree._Element, ids: List[str]) -> None:
    span = etree.SubElement(parent, "span")
    for target_id in ids:
        etree.SubElement(span, "target", id=target_id)


def _add_processor(group: etree._Element, lp: LinguisticProcessor) -> None:
    attrs = {"name": lp.name, "version": lp.version}
    if lp.begin_timestamp:
        attrs["beginTimestamp"] = lp.begin_timestamp
    if lp.end_timestamp:
        attrs["endTimestamp"] = lp.end_timestamp
    etree.SubElement(group, "lp", **attrs)


def _add_entity(layer: etree._Element, entity: Entity) -> None:
    el = etree.SubElement(layer, "entity", id=entity.id, type=entity.type)
    _add_span(etree.SubElement(el, "references"), entity.targets)


def _add_timex(layer: etree._Element, timex: Timex3) -> None:
    el = etree.SubElement(layer, "timex3", id=timex.id, type=timex.type)
    _add_span(el, timex.targets)


def _required_id(element: etree._Element) -> str:
    value = element.get("id")
    if not value:
        raise DocumentFormatError(f"<{element.tag}> without id at line {element.sourceline}")
    return value


def _int_attr(element: etree._Element, name: str, default: int) -> int:
    try:
        return int(element.get(name, default))
    except ValueError as exc:
        raise DocumentFormatError(f"Invalid word form offsets: {exc}") from exc


def _span_ids(element: etree._Element) -> List[str]:
    return [_required_id(target) for target in element.iterfind("span/target")]


def _build_tree(doc: Document) -> etree._Element:
    root = etree.Element("NAF", version=NAF_VERSION)
    root.set(XML_LANG, doc.lang)

    header = etree.SubElement(root, "nafHeader")
    layers: Dict[str, etree._Element] = {}
    for lp in doc.processors:
        if lp.layer not in layers:
            layers[lp.layer] = etree.SubElement(header, "linguisticProcessors", layer=lp.layer)
        _add_processor(layers[lp.layer], lp)

    if doc.raw:
        raw = etree.SubElement(root, "raw")
        # CDATA cannot hold its own end marker
        raw.text = etree.CDATA(doc.raw) if "]]>" not in doc.raw else doc.raw

    if doc.tokens:
        text = etree.SubElement(root, "text")
        for token in doc.tokens:
            wf = etree.SubElement(
                text,
                "wf",
                id=token.id,
                sent=token.sent,
                offset=str(token.offset),
                length=str(token.length),
            )
            if token.para is not None:
                wf.set("para", token.para)
            wf.text = token.form

    if doc.terms:
        terms = etree.SubElement(root, "terms")
        for term in doc.terms:
            el = etree.SubElement(terms, "term", id=term.id, lemma=term.lemma)
            if term.pos:
                el.set("pos", term.pos)
            if term.morphofeat:
                el.set("morphofeat", term.morphofeat)
            _add_span(el, term.targets)

    if doc.entities:
        entities = etree.SubElement(root, "entities")
        for entity in doc.entities:
            _add_entity(entities, entity)

    if doc.timexes:
        timexes = etree.SubElement(root, "timeExpressions")
        for timex in doc.timexes:
            _add_timex(timexes, timex)

    return root


def _overlay(doc: Document, root: etree._Element) -> etree._Element:
    """Add the document's processors and annotations missing from ``root``."""
    header = root.find("nafHeader")
    if header is None:
        header = etree.Element("nafHeader")
        root.insert(0, header)
    recorded = {
        (group.get("layer", ""), lp.get("name", ""), lp.get("version", ""),
         lp.get("beginTimestamp"), lp.get("endTimestamp"))
        for group in header.iterfind("linguisticProcessors")
        for lp in group.iterfind("lp")
    }
    for lp in doc.processors:
        key = (lp.layer, lp.name, lp.version, lp.begin_timestamp, lp.end_timestamp)
        if key in recorded:
            continue
        group = next(
            (g for g in header.iterfind("linguisticProcessors") if g.get("layer") == lp.layer),
            None,
        )
        if group is None:
            group = etree.SubElement(header, "linguisticProcessors", layer=lp.layer)
        _add_processor(group, lp)

    _overlay_layer(root, "entities", "entity", doc.entities, _add_entity)
    _overlay_layer(root, "timeExpressions", "timex3", doc.timexes, _add_timex)
    return root


def _overlay_layer(root, layer_tag, item_tag, items, add) -> None:
    layer = root.find(layer_tag)
    present: Set[str] = set()
    if layer is not None:
        present = {el.get("id") for el in layer.iterfind(item_tag)}
    for item in items:
        if item.id in present:
            continue
        if layer is None:
            layer = etree.SubElement(root, layer_tag)
        add(layer, item)


def dump_naf(doc: Document) -> str:
    """Serialize a document to a NAF XML string."""
    if doc.source is not None:
        root = _overlay(doc, copy.deepcopy(doc.source))
    else:
        root = _build_tree(doc)
    return XML_DECLARATION + etree.tostring(root, encoding="unicode", pretty_print=True)


def load_naf(text: str) -> Document:
    """Parse a NAF XML string into a document that keeps its parsed tree."""
    parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, strip_cdata=False)
    try:
        root = etree.fromstring(text.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as exc:
        raise DocumentFormatError(f"Invalid NAF document: {exc}") from exc
    if root.tag != "NAF":
        raise DocumentFormatError(f"Expected <NAF> root element, found <{root.tag}>")

    doc = Document(lang=root.get(XML_LANG, "en"), source=root)

    for group in root.iterfind("nafHeader/linguisticProcessors"):
        for lp in group.iterfind("lp"):
            doc.processors.append(
                LinguisticProcessor(
                    layer=group.get("layer", ""),
                    name=lp.get("name", ""),
                    version=lp.get("version", ""),
                    begin_timestamp=lp.get("beginTimestamp"),
                    end_timestamp=lp.get("endTimestamp"),
                )
            )

    raw = root.find("raw")
    if raw is not None and raw.text:
        doc.raw = raw.text

    for wf in root.iterfind("text/wf"):
        doc.add_token(
            WordForm(
                id=_required_id(wf),
                form=wf.text or "",
                sent=wf.get("sent", "1"),
                offset=_int_attr(wf, "offset", 0),
                length=_int_attr(wf, "length", len(wf.text or "")),
                para=wf.get("para"),
            )
        )

    for term in root.iterfind("terms/term"):
        doc.add_term(
            Term(
                id=_required_id(term),
                lemma=term.get("lemma", ""),
                targets=_span_ids(term),
                pos=term.get("pos", ""),
                morphofeat=term.get("morphofeat", ""),
            )
        )

    for entity in root.iterfind("entities/entity"):
        refs = entity.find("references")
        doc.entities.append(
            Entity(
                id=_required_id(entity),
                type=entity.get("type", ""),
                targets=_span_ids(refs) if refs is not None else [],
            )
        )

    for timex in root.iterfind("timeExpressions/timex3"):
        doc.timexes.append(
            Timex3(id=_required_id(timex), type=timex.get("type", ""), targets=_span_ids(timex))
        )

    return doc
