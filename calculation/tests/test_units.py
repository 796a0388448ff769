import dataclasses
import unittest

from calculation.units import (
    REGISTRY,
    CategoryDefinition,
    UnitCategory,
    UnitDefinition,
    UnitSystem,
    find_unit,
    get_category,
)


class UnitRegistryTests(unittest.TestCase):
    def test_every_category_is_registered_in_order(self):
        keys = [category.key for category in REGISTRY.categories()]
        self.assertEqual(
            keys,
            [
                UnitCategory.LENGTH,
                UnitCategory.AREA,
                UnitCategory.VOLUME,
                UnitCategory.ANGLE,
            ],
        )

    def test_categories_have_single_base_unit_and_valid_defaults(self):
        expected_bases = {
            UnitCategory.LENGTH: "m",
            UnitCategory.AREA: "sqm",
            UnitCategory.VOLUME: "cum",
            UnitCategory.ANGLE: "deg",
        }
        for category in REGISTRY.categories():
            with self.subTest(category=category.key):
                self.assertEqual(category.base_unit.key, expected_bases[category.key])
                self.assertIsNotNone(category.find(category.default_from_unit))
                self.assertIsNotNone(category.find(category.default_to_unit))
                keys = [unit.key for unit in category.units]
                self.assertEqual(len(keys), len(set(keys)))

    def test_get_category_accepts_strings(self):
        length = get_category("length")
        self.assertEqual(length.name, "Length")
        self.assertEqual(length.base_name, "meter")
        self.assertEqual(length.default_from_unit, "ft")
        self.assertEqual(length.default_to_unit, "m")

    def test_get_category_rejects_unknown_keys(self):
        with self.assertRaises(ValueError):
            get_category("temperature")

    def test_find_unit(self):
        foot = find_unit("length", "ft")
        self.assertEqual(foot.abbreviation, "ft")
        self.assertEqual(foot.system, UnitSystem.IMPERIAL)
        self.assertEqual(foot.to_base, 0.3048)
        self.assertIsNone(find_unit("length", "sqft"))

    def test_units_by_system(self):
        grouped = REGISTRY.units_by_system("volume")
        self.assertEqual([u.key for u in grouped[UnitSystem.SI]], ["ml", "l", "cum"])
        self.assertEqual(grouped[UnitSystem.IMPERIAL][0].key, "tsp")
        angle = REGISTRY.units_by_system(UnitCategory.ANGLE)
        self.assertEqual(angle[UnitSystem.IMPERIAL], ())

    def test_definitions_are_immutable(self):
        foot = find_unit("length", "ft")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            foot.to_base = 1.0
        self.assertIsInstance(get_category("area").units, tuple)

    def test_invalid_category_definitions_are_rejected(self):
        meter = UnitDefinition("m", "Meter", "m", UnitSystem.SI, 1)
        with self.assertRaises(ValueError):
            CategoryDefinition(
                key=UnitCategory.LENGTH,
                name="Length",
                base_name="meter",
                default_from_unit="m",
                default_to_unit="m",
                units=(meter, meter),
            )
        with self.assertRaises(ValueError):
            CategoryDefinition(
                key=UnitCategory.LENGTH,
                name="Length",
                base_name="meter",
                default_from_unit="ft",
                default_to_unit="m",
                units=(meter,),
            )
        with self.assertRaises(ValueError):
            UnitDefinition("x", "Broken", "x", UnitSystem.SI, 0)


if __name__ == "__main__":
    unittest.main()
