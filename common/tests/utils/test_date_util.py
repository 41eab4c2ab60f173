from unittest import TestCase
from unittest.mock import patch


class Test(TestCase):
    def test_get_fixed_width_str_of_timestamp_ns(self):
        # lazy load
        from common.utils.date_util import get_fixed_width_str_of_timestamp_ns

        # normal case
        timestamp_ns = 1714521600123456789
        expected_result = "20240501000000123456789"
        actual_result = get_fixed_width_str_of_timestamp_ns(timestamp_ns)
        self.assertEqual(expected_result, actual_result)

        # leading zeros in nanoseconds
        timestamp_ns = 1714521601000000042
        expected_result = "20240501000001000000042"
        actual_result = get_fixed_width_str_of_timestamp_ns(timestamp_ns)
        self.assertEqual(expected_result, actual_result)

        # epoch case
        expected_result = "19700101000000000000000"
        actual_result = get_fixed_width_str_of_timestamp_ns(0)
        self.assertEqual(expected_result, actual_result)

    def test_fixed_width_str_sorts_like_timestamp(self):
        # lazy load
        from common.utils.date_util import get_fixed_width_str_of_timestamp_ns

        timestamps = [1714521600999999999, 1714521601000000000, 1714521600000000001]
        actual_result = sorted(timestamps, key=get_fixed_width_str_of_timestamp_ns)
        self.assertEqual(sorted(timestamps), actual_result)

    def test_get_now_fixed_width_str(self):
        # lazy load
        from common.utils.date_util import get_now_fixed_width_str

        with patch("common.utils.date_util.time.time_ns", return_value=1714521600123456789):
            self.assertEqual("20240501000000123456789", get_now_fixed_width_str())

        actual_result = get_now_fixed_width_str()
        self.assertEqual(23, len(actual_result))
        self.assertTrue(actual_result.isdigit())
