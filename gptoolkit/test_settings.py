"""
Tests for api settings validation
"""

import unittest

from gptoolkit.exceptions import InvalidSettings
from gptoolkit.settings import ApiSettings


class TestApiSettings(unittest.TestCase):
    def test_defaults(self):
        settings = ApiSettings()
        self.assertEqual(settings.max_concurrent_single_api_req, 30)
        self.assertEqual(settings.max_concurrent_batch_api_req, 3)
        self.assertEqual(settings.operation_size, 250)
        self.assertEqual(settings.info_size, 5000)
        self.assertEqual(settings.locked_folder_op_size, 100)

    def test_from_mapping_camel_case_and_strings(self):
        settings = ApiSettings.from_mapping({"maxConcurrentBatchApiReq": "5", "operationSize": 10, "infoSize": None})
        self.assertEqual(settings.max_concurrent_batch_api_req, 5)
        self.assertEqual(settings.operation_size, 10)
        self.assertEqual(settings.info_size, 5000)

    def test_from_mapping_snake_case(self):
        settings = ApiSettings.from_mapping({"locked_folder_op_size": 7})
        self.assertEqual(settings.locked_folder_op_size, 7)

    def test_rejects_invalid_values(self):
        for value in (0, -1, "abc", "", "1.5", 2.5, True, [3]):
            with self.subTest(value=value):
                with self.assertRaises(InvalidSettings):
                    ApiSettings.from_mapping({"operationSize": value})

    def test_whole_float_is_accepted(self):
        self.assertEqual(ApiSettings(operation_size=4.0).operation_size, 4)

    def test_from_env(self):
        environ = {"GPTK_MAX_CONCURRENT_SINGLE_API_REQ": "8", "GPTK_INFO_SIZE": " ", "PATH": "/bin"}
        settings = ApiSettings.from_env(environ)
        self.assertEqual(settings.max_concurrent_single_api_req, 8)
        self.assertEqual(settings.info_size, 5000)

    def test_from_env_rejects_zero(self):
        with self.assertRaises(ValueError):
            ApiSettings.from_env({"GPTK_OPERATION_SIZE": "0"})


if __name__ == "__main__":
    unittest.main()
