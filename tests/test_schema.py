"""Tests for per-class schema synthesis."""

import threading
import unittest
from concurrent.futures import ThreadPoolExecutor

import pytest
from rdflib import Graph, URIRef
from rdflib.namespace import RDFS

from owl2oas.errors import AmbiguousRangeError, CycleDetected, DuplicateLabelError, UnmappedDatatype
from owl2oas.ontology import build_model
from owl2oas.schema import SchemaSynthesizer, check_acyclic

PREFIXES = """
@prefix ex: <http://example.org/rec#> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
"""

EX = "http://example.org/rec#"

BUILDINGS = """
ex:Asset a owl:Class ; rdfs:label "Asset"@en .
ex:Building a owl:Class ;
    rdfs:label "Building"@en ;
    rdfs:subClassOf ex:Asset ,
        [ a owl:Restriction ; owl:onProperty ex:name ;
          owl:cardinality "1"^^xsd:nonNegativeInteger ] .
ex:Device a owl:Class ;
    rdfs:label "Device"@en, "Dispositivo" ;
    rdfs:comment "A piece of equipment."@en .
ex:name a owl:DatatypeProperty ; rdfs:label "name"@en ;
    rdfs:domain ex:Asset ; rdfs:range xsd:string .
ex:height a owl:DatatypeProperty, owl:FunctionalProperty ;
    rdfs:domain ex:Building ; rdfs:range xsd:double .
ex:hasDevice a owl:ObjectProperty ;
    rdfs:comment "Devices installed in the building."@en ;
    rdfs:domain ex:Building ; rdfs:range ex:Device .
ex:serialNumber a owl:DatatypeProperty ; rdfs:domain ex:Device ; rdfs:range ex:Serial .
ex:Serial a rdfs:Datatype ; owl:equivalentClass xsd:string .
ex:installedAt a owl:DatatypeProperty ; rdfs:domain ex:Device ; rdfs:range xsd:dateTime .
ex:colour a owl:DatatypeProperty ; rdfs:domain ex:Device ; rdfs:range ex:Colour .
ex:description a owl:DatatypeProperty ; rdfs:domain ex:Device ; rdfs:range rdf:langString .
ex:relatedTo a owl:ObjectProperty ; rdfs:domain ex:Device ; rdfs:range owl:Thing .
ex:vendor a owl:ObjectProperty, owl:FunctionalProperty ;
    rdfs:domain ex:Device ; rdfs:range ex:Organisation ; owl:deprecated true .
"""


def ex(name: str) -> URIRef:
    return URIRef(EX + name)


def model_from(turtle: str):
    return build_model(Graph().parse(data=PREFIXES + turtle, format="turtle"))


class SchemaSynthesizerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.synthesizer = SchemaSynthesizer(model_from(BUILDINGS), language="en")

    def test_superclass_properties_are_composed_not_copied(self) -> None:
        schema = self.synthesizer.schema_for(ex("Building")).to_dict()

        self.assertEqual([{"$ref": "#/components/schemas/Asset"}], schema["allOf"])
        self.assertEqual(
            ["@id", "@type", "label", "hasDevice", "height"], list(schema["properties"])
        )
        self.assertEqual(["name"], schema["required"])

    def test_property_types(self) -> None:
        building = self.synthesizer.schema_for(ex("Building")).to_dict()["properties"]

        self.assertEqual({"type": "number", "format": "double"}, building["height"])
        self.assertEqual(
            {
                "type": "array",
                "items": {"$ref": "#/components/schemas/Device"},
                "description": "Devices installed in the building.",
            },
            building["hasDevice"],
        )

    def test_datatype_aliases_thing_and_external_ranges(self) -> None:
        device = self.synthesizer.schema_for(ex("Device")).to_dict()
        properties = device["properties"]

        self.assertEqual("A piece of equipment.", device["description"])
        self.assertEqual({"type": "string"}, properties["serialNumber"]["items"])
        self.assertEqual({"type": "string", "format": "date-time"}, properties["installedAt"]["items"])
        self.assertEqual({"type": "string"}, properties["description"]["items"])
        self.assertEqual({"type": "string", "format": "uri"}, properties["relatedTo"]["items"])
        self.assertEqual(
            {"type": "string", "format": "uri", "deprecated": True}, properties["vendor"]
        )

    def test_unmapped_datatype_is_reported(self) -> None:
        self.synthesizer.schema_for(ex("Device"))

        self.assertEqual(
            (UnmappedDatatype(EX + "colour", EX + "Colour", EX + "Device"),),
            self.synthesizer.notices,
        )
        device = self.synthesizer.schema_for(ex("Device")).to_dict()
        self.assertEqual({"type": "string"}, device["properties"]["colour"]["items"])

    def test_schema_for_is_memoised(self) -> None:
        first = self.synthesizer.schema_for(ex("Building"))

        self.assertIs(first, self.synthesizer.schema_for(ex("Building")))

    def test_datatypes_have_no_schema(self) -> None:
        with self.assertRaises(KeyError):
            self.synthesizer.schema_for(ex("Serial"))

    def test_language_selects_title(self) -> None:
        synthesizer = SchemaSynthesizer(model_from(BUILDINGS), language="es")

        self.assertEqual("Dispositivo", synthesizer.schema_for(ex("Device")).title)
        self.assertEqual("Dispositivo", synthesizer.class_key(ex("Device")))


def test_concurrent_synthesis_builds_each_schema_once(monkeypatch):
    synthesizer = SchemaSynthesizer(model_from(BUILDINGS))
    calls = []
    lock = threading.Lock()
    original = synthesizer._synthesize

    def counting(cls):
        with lock:
            calls.append(cls.identifier)
        return original(cls)

    monkeypatch.setattr(synthesizer, "_synthesize", counting)
    identifiers = [ex("Building"), ex("Asset"), ex("Device")] * 4
    with ThreadPoolExecutor(max_workers=6) as executor:
        schemas = list(executor.map(synthesizer.schema_for, identifiers))

    assert sorted(calls) == sorted({ex("Asset"), ex("Building"), ex("Device")})
    assert len({id(schema) for schema in schemas}) == 3


def test_restricted_inherited_property_is_required_on_subclass():
    model = model_from(
        """
        ex:Space a owl:Class .
        ex:Room a owl:Class ; rdfs:subClassOf ex:Space ,
            [ a owl:Restriction ; owl:onProperty ex:area ; owl:minCardinality 1 ] .
        ex:area a owl:DatatypeProperty ; rdfs:domain ex:Space ; rdfs:range xsd:decimal .
        """
    )
    synthesizer = SchemaSynthesizer(model)

    room = synthesizer.schema_for(ex("Room")).to_dict()
    space = synthesizer.schema_for(ex("Space")).to_dict()

    assert list(room["properties"]) == ["@id", "@type", "label"]
    assert room["required"] == ["area"]
    assert "required" not in space
    assert space["properties"]["area"] == {"type": "array", "items": {"type": "number"}}


def test_most_specific_range_wins():
    model = model_from(
        """
        ex:Space a owl:Class .
        ex:Room a owl:Class ; rdfs:subClassOf ex:Space .
        ex:Sensor a owl:Class .
        ex:locatedIn a owl:ObjectProperty ; rdfs:domain ex:Sensor ;
            rdfs:range ex:Space, ex:Room .
        """
    )

    schema = SchemaSynthesizer(model).schema_for(ex("Sensor")).to_dict()

    assert schema["properties"]["locatedIn"]["items"] == {"$ref": "#/components/schemas/Room"}


def test_unrelated_ranges_are_ambiguous():
    model = model_from(
        """
        ex:Room a owl:Class .
        ex:Device a owl:Class .
        ex:Sensor a owl:Class .
        ex:locatedIn a owl:ObjectProperty ; rdfs:domain ex:Sensor ;
            rdfs:range ex:Room, ex:Device .
        """
    )

    with pytest.raises(AmbiguousRangeError) as excinfo:
        SchemaSynthesizer(model).schema_for(ex("Sensor"))

    assert excinfo.value.identifiers == (EX + "locatedIn", EX + "Sensor")


def test_duplicate_property_names_within_a_class():
    model = model_from(
        """
        ex:Room a owl:Class .
        ex:label1 a owl:DatatypeProperty ; rdfs:label "name" ; rdfs:domain ex:Room .
        ex:label2 a owl:DatatypeProperty ; rdfs:label "name" ; rdfs:domain ex:Room .
        """
    )

    with pytest.raises(DuplicateLabelError) as excinfo:
        SchemaSynthesizer(model).schema_for(ex("Room"))

    assert excinfo.value.sources == (ex("label1"), ex("label2"))


def test_superclass_cycle_is_detected():
    model = model_from(
        """
        ex:A a owl:Class ; rdfs:subClassOf ex:B .
        ex:B a owl:Class ; rdfs:subClassOf ex:A .
        """
    )

    with pytest.raises(CycleDetected) as excinfo:
        check_acyclic(model)
    assert excinfo.value.cycle == (ex("A"), ex("B"), ex("A"))

    with pytest.raises(CycleDetected):
        SchemaSynthesizer(model)


def test_deprecated_class_schema():
    model = model_from("ex:Legacy a owl:Class ; owl:deprecated true .")

    assert SchemaSynthesizer(model).schema_for(ex("Legacy")).to_dict() == {
        "title": "Legacy",
        "type": "object",
        "properties": {
            "@id": {"type": "string"},
            "@type": {"type": "string", "default": "Legacy"},
            "label": {"type": "string"},
        },
        "deprecated": True,
    }


def test_own_property_name_clashing_with_inherited_one():
    model = model_from(
        """
        ex:Asset a owl:Class .
        ex:Building a owl:Class ; rdfs:subClassOf ex:Asset .
        ex:name a owl:DatatypeProperty ; rdfs:label "name" ;
            rdfs:domain ex:Asset ; rdfs:range xsd:string .
        ex:otherName a owl:DatatypeProperty ; rdfs:label "name" ;
            rdfs:domain ex:Building ; rdfs:range xsd:integer .
        """
    )
    synthesizer = SchemaSynthesizer(model)

    with pytest.raises(DuplicateLabelError) as excinfo:
        synthesizer.schema_for(ex("Building"))

    assert excinfo.value.sources == (ex("name"), ex("otherName"))


def test_superclasses_contributing_the_same_name():
    model = model_from(
        """
        ex:Left a owl:Class .
        ex:Right a owl:Class .
        ex:Both a owl:Class ; rdfs:subClassOf ex:Left, ex:Right .
        ex:leftCode a owl:DatatypeProperty ; rdfs:label "code" ; rdfs:domain ex:Left .
        ex:rightCode a owl:DatatypeProperty ; rdfs:label "code" ; rdfs:domain ex:Right .
        """
    )

    with pytest.raises(DuplicateLabelError) as excinfo:
        SchemaSynthesizer(model).schema_for(ex("Both"))

    assert excinfo.value.sources == (ex("leftCode"), ex("rightCode"))


def test_property_named_like_an_identity_field():
    model = model_from(
        """
        ex:Room a owl:Class .
        ex:roomLabel a owl:DatatypeProperty ; rdfs:label "label" ; rdfs:domain ex:Room .
        """
    )

    with pytest.raises(DuplicateLabelError) as excinfo:
        SchemaSynthesizer(model).schema_for(ex("Room"))

    assert excinfo.value.sources == (RDFS.label, ex("roomLabel"))


class MultipleInheritanceTests(unittest.TestCase):
    def setUp(self) -> None:
        model = model_from(
            """
            ex:Root a owl:Class ; rdfs:label "Root" .
            ex:A a owl:Class ; rdfs:label "Zeta" ; rdfs:subClassOf ex:Root .
            ex:B a owl:Class ; rdfs:label "Alpha" ; rdfs:subClassOf ex:Root .
            ex:C a owl:Class ; rdfs:label "Combined" ;
                rdfs:subClassOf ex:A, ex:B ,
                    [ a owl:Restriction ; owl:onProperty ex:a ; owl:minCardinality 1 ] .
            ex:r a owl:DatatypeProperty ; rdfs:domain ex:Root .
            ex:a a owl:DatatypeProperty ; rdfs:domain ex:A .
            ex:b a owl:DatatypeProperty ; rdfs:domain ex:B .
            ex:c a owl:DatatypeProperty ; rdfs:domain ex:C .
            """
        )
        self.synthesizer = SchemaSynthesizer(model)

    def test_all_of_lists_both_parents_by_label(self) -> None:
        schema = self.synthesizer.schema_for(ex("C")).to_dict()

        self.assertEqual(
            [{"$ref": "#/components/schemas/Alpha"}, {"$ref": "#/components/schemas/Zeta"}],
            schema["allOf"],
        )

    def test_own_properties_exclude_everything_inherited(self) -> None:
        schema = self.synthesizer.schema_for(ex("C"))

        self.assertEqual(["c"], [spec.name for spec in schema.properties])
        self.assertEqual(("a",), schema.required)
        self.assertEqual({ex("r"), ex("a"), ex("b"), ex("c")}, set(schema.available))


INCLUSION = """
@prefix o2o: <https://karlhammar.com/owl2oas/o2o.owl#> .
ex:Asset a owl:Class .
ex:Building a owl:Class ; rdfs:subClassOf ex:Asset ;
    o2o:included true ; o2o:endpoint "buildings" .
ex:Device a owl:Class .
ex:hasDevice a owl:ObjectProperty ; rdfs:domain ex:Building ; rdfs:range ex:Device .
ex:height a owl:DatatypeProperty ; rdfs:domain ex:Building ; rdfs:range xsd:double .
ex:secret a owl:DatatypeProperty ; rdfs:domain ex:Building ; o2o:included false .
ex:code a owl:DatatypeProperty ; rdfs:domain ex:Building ; o2o:included true .
"""


def test_excluded_classes_keep_included_ancestors_without_paths():
    synthesizer = SchemaSynthesizer(model_from(INCLUSION), include_classes=False)

    assert synthesizer.published_classes() == [ex("Asset"), ex("Building")]
    with pytest.raises(KeyError):
        synthesizer.schema_for(ex("Device"))

    building = synthesizer.schema_for(ex("Building"))
    assert building.exposed
    assert building.endpoint == "buildings"
    assert not synthesizer.schema_for(ex("Asset")).exposed
    properties = building.to_dict()["properties"]
    assert properties["hasDevice"]["items"] == {"type": "string", "format": "uri"}
    assert "secret" not in properties
    assert "code" in properties


def test_property_policy_honours_explicit_inclusion():
    synthesizer = SchemaSynthesizer(model_from(INCLUSION), include_properties=False)

    building = synthesizer.schema_for(ex("Building"))

    assert [spec.name for spec in building.properties] == ["code"]
    assert synthesizer.schema_for(ex("Device")).exposed


def test_very_deep_hierarchy():
    depth = 1200
    lines = ["ex:C0 a owl:Class ."]
    lines.extend(f"ex:C{i} a owl:Class ; rdfs:subClassOf ex:C{i - 1} ." for i in range(1, depth))
    model = model_from("\n".join(lines))
    check_acyclic(model)

    schema = SchemaSynthesizer(model).schema_for(ex(f"C{depth - 1}"))

    assert schema.superclasses == (f"C{depth - 2}",)


def test_cycle_deep_in_hierarchy():
    lines = [f"ex:C{i} a owl:Class ; rdfs:subClassOf ex:C{i + 1} ." for i in range(1500)]
    lines.append("ex:C1500 a owl:Class ; rdfs:subClassOf ex:C1499 .")

    with pytest.raises(CycleDetected) as excinfo:
        check_acyclic(model_from("\n".join(lines)))

    assert excinfo.value.cycle == (ex("C1499"), ex("C1500"), ex("C1499"))
